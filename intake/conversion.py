"""
PNG to data-URL conversion with a size-based integrity check.

The metadata is read again from the stored bytes rather than taken from the
record, so corruption after storage surfaces here. The encoded string must land
within 1% of ceil(size * 4/3) plus the length of its "data:<mime>;base64," prefix.
"""

from typing import Any
import base64
import logging
import math

from intake.binary import OutOfBoundsError
from intake.errors import ErrorCode, ServiceError, describe_cause
from intake.models import ConversionResult, PngMetadata, validate_file_id
from intake.store import ImageStore
from intake.validators import inspect_png

logger = logging.getLogger("intake.conversion")

INTEGRITY_TOLERANCE = 0.01


def data_url_prefix(mime_type: str) -> str:
    return f"data:{mime_type};base64,"


def expected_encoded_size(size_bytes: int, prefix: str) -> int:
    return math.ceil(size_bytes * 4 / 3) + len(prefix)


def within_tolerance(actual_size: int, expected_size: int) -> bool:
    return abs(actual_size - expected_size) <= expected_size * INTEGRITY_TOLERANCE


def encode_data_url(content: bytes, mime_type: str) -> str:
    return data_url_prefix(mime_type) + base64.b64encode(content).decode("ascii")


class ConversionEngine:
    def __init__(self, store: ImageStore) -> None:
        self.store = store

    def _extract_metadata(self, content: bytes) -> PngMetadata:
        try:
            return inspect_png(content)
        except (OutOfBoundsError, MemoryError) as exc:
            raise ServiceError(
                ErrorCode.MEMORY_ERROR,
                "Insufficient memory to process the file",
                describe_cause(exc),
            ) from exc

    def convert(self, raw_file_id: Any) -> ConversionResult:
        file_id = validate_file_id(raw_file_id)
        scratch: list[object] = []

        try:
            record = self.store.get_by_id(file_id)
            if record is None:
                raise ServiceError(
                    ErrorCode.NOT_FOUND,
                    "File not found. Please upload it again",
                )

            metadata = self._extract_metadata(record.raw_bytes)
            prefix = data_url_prefix(record.mime_type)
            expected_size = expected_encoded_size(record.size_bytes, prefix)

            try:
                data_url = encode_data_url(record.raw_bytes, record.mime_type)
            except MemoryError as exc:
                raise ServiceError(
                    ErrorCode.MEMORY_ERROR,
                    "Insufficient memory to process the file",
                    describe_cause(exc),
                ) from exc
            except Exception as exc:
                raise ServiceError(
                    ErrorCode.CONVERSION_FAILED,
                    "The file could not be converted to base64",
                    describe_cause(exc),
                ) from exc
            scratch.append(data_url)

            actual_size = len(data_url)
            if not within_tolerance(actual_size, expected_size):
                logger.error(
                    "Conversion integrity check failed for %s: expected=%s actual=%s",
                    file_id, expected_size, actual_size,
                )
                raise ServiceError(
                    ErrorCode.INTEGRITY_ERROR,
                    "The conversion did not preserve the image integrity",
                    {
                        "expected_size": expected_size,
                        "actual_size": actual_size,
                        "difference": abs(actual_size - expected_size),
                    },
                )

            logger.info(
                "Converted %s: %s bytes -> %s chars", file_id, record.size_bytes, actual_size
            )
            return ConversionResult(
                file_id=file_id,
                data_url=data_url,
                base64_size=actual_size,
                expected_size=expected_size,
                integrity_valid=True,
                metadata=metadata,
            )
        except ServiceError:
            raise
        except MemoryError as exc:
            raise ServiceError(
                ErrorCode.MEMORY_ERROR,
                "Insufficient memory to process the file",
                describe_cause(exc),
            ) from exc
        except Exception as exc:
            logger.exception("Unexpected conversion failure for %s", file_id)
            raise ServiceError(
                ErrorCode.CONVERSION_FAILED,
                "An error occurred while processing the conversion",
                describe_cause(exc),
            ) from exc
        finally:
            # drop intermediate buffers on every exit path
            scratch.clear()
