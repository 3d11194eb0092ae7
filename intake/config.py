import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
        return parsed if parsed > 0 else default
    except ValueError:
        return default


PNG_MIME_TYPE = "image/png"
PDF_MIME_TYPE = "application/pdf"

IMAGE_MAX_FILE_SIZE_BYTES = _env_int("IMAGE_MAX_FILE_SIZE_BYTES", 10 * 1024 * 1024)
DOCUMENT_MAX_FILE_SIZE_BYTES = _env_int("DOCUMENT_MAX_FILE_SIZE_BYTES", 50 * 1024 * 1024)

MAX_RECORDS = _env_int("MAX_RECORDS", 100)

ACCESS_TOKEN_VALIDITY_HOURS = _env_int("ACCESS_TOKEN_VALIDITY_HOURS", 24)

# placeholder: simulated engine call, off: skip scanning entirely
SCANNER_MODE = os.getenv("SCANNER_MODE", "placeholder").strip().lower()
SCAN_DELAY_SECONDS = 0.1
SCAN_TIMEOUT_SECONDS = 10.0

DEFAULT_IMAGE_NAME = "upload.png"
DEFAULT_DOCUMENT_NAME = "upload.pdf"
