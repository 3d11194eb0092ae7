from threading import Lock
from typing import Generic, TypeVar

from intake.config import MAX_RECORDS
from intake.models import DocumentRecord, ImageRecord, UploadedAsset

RecordT = TypeVar("RecordT", bound=UploadedAsset)


class StoreFullError(Exception):
    """Raised when a partition already holds its maximum number of records."""


class RecordStore(Generic[RecordT]):
    """In-memory keyed record map with a live capacity bound."""

    def __init__(self, max_records: int = MAX_RECORDS) -> None:
        self.max_records = max_records
        self._lock = Lock()
        self._records: dict[str, RecordT] = {}

    def add(self, record: RecordT) -> RecordT:
        with self._lock:
            if len(self._records) >= self.max_records:
                raise StoreFullError("Maximum file upload limit reached")
            self._records[record.id] = record
        return record

    def get_by_id(self, record_id: str) -> RecordT | None:
        with self._lock:
            return self._records.get(record_id)

    def get_all(self) -> list[RecordT]:
        with self._lock:
            return list(self._records.values())

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def exists(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._records

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class ImageStore(RecordStore[ImageRecord]):
    pass


class DocumentStore(RecordStore[DocumentRecord]):
    """
    Adds a quarantine partition for records whose scan could not complete,
    and a single-slot gate that allows one upload in flight at a time.
    """

    def __init__(self, max_records: int = MAX_RECORDS) -> None:
        super().__init__(max_records)
        self._quarantine: dict[str, DocumentRecord] = {}
        self._upload_in_progress: str | None = None

    # Gate

    def has_upload_in_progress(self) -> bool:
        with self._lock:
            return self._upload_in_progress is not None

    def set_upload_in_progress(self, upload_id: str) -> None:
        with self._lock:
            self._upload_in_progress = upload_id

    def try_begin_upload(self, upload_id: str) -> bool:
        """Claim the gate for `upload_id`; False if another upload holds it."""
        with self._lock:
            if self._upload_in_progress is not None:
                return False
            self._upload_in_progress = upload_id
            return True

    def clear_upload_in_progress(self) -> None:
        with self._lock:
            self._upload_in_progress = None

    # Quarantine

    def add_to_quarantine(self, record: DocumentRecord) -> DocumentRecord:
        with self._lock:
            if len(self._quarantine) >= self.max_records:
                raise StoreFullError("Maximum quarantined file limit reached")
            self._quarantine[record.id] = record
        return record

    def get_quarantined(self) -> list[DocumentRecord]:
        with self._lock:
            return list(self._quarantine.values())

    def is_quarantined(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._quarantine

    # Lookups span both partitions

    def get_by_id(self, record_id: str) -> DocumentRecord | None:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                record = self._quarantine.get(record_id)
            return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            if self._records.pop(record_id, None) is not None:
                return True
            return self._quarantine.pop(record_id, None) is not None

    def exists(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._records or record_id in self._quarantine

    def count(self) -> int:
        with self._lock:
            return len(self._records) + len(self._quarantine)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._quarantine.clear()
            self._upload_in_progress = None
