from dataclasses import dataclass
from typing import Protocol
import asyncio
import logging

from intake.config import SCAN_DELAY_SECONDS, SCAN_TIMEOUT_SECONDS, SCANNER_MODE
from intake.models import ScanResult

logger = logging.getLogger("intake.scanner")


@dataclass
class ScanReport:
    outcome: ScanResult
    engine: str
    detail: str


class ScanBackend(Protocol):
    engine: str

    async def scan(self, content: bytes) -> ScanReport: ...


class PlaceholderScanBackend:
    """Stands in for a real engine call; reports clean after a short delay."""

    engine = "placeholder"

    def __init__(self, delay_seconds: float = SCAN_DELAY_SECONDS) -> None:
        self.delay_seconds = delay_seconds

    async def scan(self, content: bytes) -> ScanReport:
        await asyncio.sleep(self.delay_seconds)
        return ScanReport(
            outcome=ScanResult.CLEAN,
            engine=self.engine,
            detail="No signature matched",
        )


class DisabledScanBackend:
    engine = "off"

    async def scan(self, content: bytes) -> ScanReport:
        return ScanReport(
            outcome=ScanResult.UNSCANNED,
            engine=self.engine,
            detail="Scanning disabled",
        )


class ScanCoordinator:
    """
    Race the backend scan against a fixed timeout.

    Whichever finishes first decides the outcome; the other task is cancelled
    and never awaited. A backend that raises or does not answer in time yields
    scan_unavailable, so the upload proceeds into quarantine instead of failing.
    """

    def __init__(
        self,
        backend: ScanBackend,
        timeout_seconds: float = SCAN_TIMEOUT_SECONDS,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds

    def _unavailable(self, detail: str) -> ScanReport:
        return ScanReport(
            outcome=ScanResult.SCAN_UNAVAILABLE,
            engine=self.backend.engine,
            detail=detail,
        )

    async def _timeout(self) -> ScanReport:
        await asyncio.sleep(self.timeout_seconds)
        return self._unavailable(f"Scan timed out after {self.timeout_seconds:g}s")

    async def scan(self, content: bytes) -> ScanReport:
        tasks: list[asyncio.Future] = []
        try:
            scan_task = asyncio.ensure_future(self.backend.scan(content))
            tasks.append(scan_task)
            timeout_task = asyncio.ensure_future(self._timeout())
            tasks.append(timeout_task)
            done, _ = await asyncio.wait(
                {scan_task, timeout_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if scan_task in done:
                return scan_task.result()

            logger.warning(
                "Scan backend %s did not answer within %ss",
                self.backend.engine, self.timeout_seconds,
            )
            return timeout_task.result()
        except Exception as exc:
            logger.warning("Scan backend %s failed: %s", self.backend.engine, exc)
            return self._unavailable("Scan backend unavailable")
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()


def build_scan_coordinator(mode: str | None = None) -> ScanCoordinator:
    """
    Scan mode:
    - placeholder (default): simulated engine call that reports clean
    - off: skip scanning, records are marked unscanned
    """
    mode = (mode or SCANNER_MODE).strip().lower()
    if mode == "off":
        return ScanCoordinator(DisabledScanBackend())
    if mode != "placeholder":
        logger.warning("Unknown SCANNER_MODE %r, using placeholder scanner", mode)
    return ScanCoordinator(PlaceholderScanBackend())
