from typing import Any, Generic
import logging

from intake.errors import ErrorCode, ServiceError
from intake.models import validate_file_id
from intake.store import RecordStore, RecordT

logger = logging.getLogger("intake.services")


class RecordService(Generic[RecordT]):
    """Lookup and cancellation shared by the image and document services."""

    def __init__(self, store: RecordStore[RecordT]) -> None:
        self.store = store

    def get(self, raw_id: Any) -> dict[str, Any]:
        record_id = validate_file_id(raw_id)
        record = self.store.get_by_id(record_id)
        if record is None:
            raise ServiceError(ErrorCode.NOT_FOUND, "File not found")
        return record.to_response()

    def cancel(self, raw_id: Any) -> dict[str, str]:
        record_id = validate_file_id(raw_id)
        if not self.store.delete(record_id):
            raise ServiceError(ErrorCode.NOT_FOUND, "File not found")
        logger.info("Deleted record %s", record_id)
        return {"message": "File deleted successfully"}
