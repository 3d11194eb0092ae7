from collections.abc import AsyncIterable
import logging

from intake.errors import ErrorCode, ServiceError, describe_cause

logger = logging.getLogger("intake.size_guard")


def _max_size_mb(max_bytes: int) -> str:
    return f"{max_bytes / (1024 * 1024):g}"


async def read_limited(
    stream: AsyncIterable[bytes],
    max_bytes: int,
    *,
    kind: str,
) -> bytes:
    """
    Buffer `stream` to completion, aborting as soon as more than `max_bytes` arrive.

    `kind` names the expected format in the "no file selected" message.
    """
    chunks: list[bytes] = []
    total = 0
    try:
        async for chunk in stream:
            if not chunk:
                continue
            total += len(chunk)
            if total > max_bytes:
                chunks.clear()
                logger.warning("Upload aborted after %s bytes (limit %s)", total, max_bytes)
                raise ServiceError(
                    ErrorCode.FILE_TOO_LARGE,
                    f"The file exceeds the {_max_size_mb(max_bytes)}MB limit. "
                    "Please select a smaller file",
                    {"max_bytes": max_bytes},
                )
            chunks.append(chunk)
    except ServiceError:
        raise
    except Exception as exc:
        chunks.clear()
        logger.warning("Upload stream failed after %s bytes: %s", total, exc)
        raise ServiceError(
            ErrorCode.UPLOAD_FAILED,
            "The file could not be uploaded due to connection problems. Please try again",
            describe_cause(exc),
        ) from exc

    if total == 0:
        raise ServiceError(
            ErrorCode.VALIDATION_ERROR,
            f"No file was selected. Please select a {kind} file",
        )

    return b"".join(chunks)
