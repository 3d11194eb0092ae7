"""
errors.py
- ServiceError is raised by every pipeline stage for failures the caller should see.
- The HTTP layer turns it into {"success": false, "error": {...}} with its status code.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Upload
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    CORRUPTED_FILE = "CORRUPTED_FILE"
    MALWARE_DETECTED = "MALWARE_DETECTED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    UPLOAD_IN_PROGRESS = "UPLOAD_IN_PROGRESS"

    # Conversion
    CONVERSION_FAILED = "CONVERSION_FAILED"
    INTEGRITY_ERROR = "INTEGRITY_ERROR"
    MEMORY_ERROR = "MEMORY_ERROR"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_FILE_TYPE: 400,
    ErrorCode.FILE_TOO_LARGE: 413,
    ErrorCode.CORRUPTED_FILE: 400,
    ErrorCode.MALWARE_DETECTED: 400,
    ErrorCode.UPLOAD_FAILED: 500,
    ErrorCode.UPLOAD_IN_PROGRESS: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONVERSION_FAILED: 500,
    ErrorCode.INTEGRITY_ERROR: 500,
    ErrorCode.MEMORY_ERROR: 500,
}


class ServiceError(Exception):
    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            },
        }


def describe_cause(exc: BaseException) -> dict[str, str]:
    """Diagnostic detail for an infrastructure failure, without the traceback."""
    return {"cause": type(exc).__name__}
