from datetime import UTC, datetime
from enum import Enum
from typing import Any
import re
import uuid

from pydantic import BaseModel, Field

from intake.errors import ErrorCode, ServiceError

FILE_ID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class ScanResult(str, Enum):
    CLEAN = "clean"
    INFECTED = "infected"
    UNSCANNED = "unscanned"
    SCAN_UNAVAILABLE = "scan_unavailable"


class CorruptionKind(str, Enum):
    INVALID_HEADER = "invalid_header"
    BROKEN_XREF = "broken_xref"
    MISSING_TRAILER = "missing_trailer"
    CORRUPTED_OBJECT = "corrupted_object"
    INVALID_STREAM = "invalid_stream"
    INVALID_STRUCTURE = "invalid_structure"
    OTHER = "other"


class LifecycleState(str, Enum):
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    INTERRUPTED = "interrupted"


def new_record_id() -> str:
    return str(uuid.uuid4())


def validate_file_id(raw: Any) -> str:
    """Reject anything that is not a canonical UUID string before a store lookup."""
    if not isinstance(raw, str) or not FILE_ID_RE.match(raw):
        raise ServiceError(
            ErrorCode.VALIDATION_ERROR,
            "Invalid file ID",
            {"id": "must be a UUID"},
        )
    return raw


def format_file_size(size: int) -> str:
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class UploadedAsset(BaseModel):
    id: str = Field(default_factory=new_record_id)
    original_name: str
    mime_type: str
    size_bytes: int = Field(ge=0)
    size_formatted: str
    raw_bytes: bytes = Field(exclude=True, repr=False)
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ImageRecord(UploadedAsset):
    width: int
    height: int
    dimensions: str
    preview_url: str = Field(repr=False)


class DocumentRecord(UploadedAsset):
    integrity_valid: bool = True
    corruption_kind: CorruptionKind | None = None
    scan_result: ScanResult
    access_token: str
    lifecycle_state: LifecycleState = LifecycleState.ACCEPTED

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"lifecycle_state"})


class PngMetadata(BaseModel):
    width: int
    height: int
    bit_depth: int
    color_type: int
    has_transparency: bool


class ConversionResult(BaseModel):
    file_id: str
    data_url: str
    base64_size: int
    expected_size: int
    integrity_valid: bool
    metadata: PngMetadata
    converted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
