from collections.abc import AsyncIterable
from typing import Any
import logging

from intake.config import DEFAULT_DOCUMENT_NAME, DOCUMENT_MAX_FILE_SIZE_BYTES, PDF_MIME_TYPE
from intake.errors import ErrorCode, ServiceError, describe_cause
from intake.models import (
    DocumentRecord,
    LifecycleState,
    ScanResult,
    format_file_size,
    new_record_id,
)
from intake.scanner import ScanCoordinator
from intake.services.base import RecordService
from intake.size_guard import read_limited
from intake.store import DocumentStore
from intake.tokens import AccessTokenIssuer
from intake.validators import has_pdf_signature, inspect_pdf

logger = logging.getLogger("intake.documents")


class DocumentUploadService(RecordService[DocumentRecord]):
    """
    PDF pipeline: gate, size guard, signature, structure, scan, store.

    Only one document upload may be in flight per store. The gate is claimed
    before any byte of the request is read and released in a finally block,
    so failures and task cancellation never leave it held.
    """

    def __init__(
        self,
        store: DocumentStore,
        scanner: ScanCoordinator,
        token_issuer: AccessTokenIssuer,
        max_file_size: int = DOCUMENT_MAX_FILE_SIZE_BYTES,
    ) -> None:
        super().__init__(store)
        self.store: DocumentStore = store
        self.scanner = scanner
        self.token_issuer = token_issuer
        self.max_file_size = max_file_size

    async def upload(
        self,
        stream: AsyncIterable[bytes],
        declared_name: str | None = None,
    ) -> dict[str, Any]:
        upload_id = new_record_id()
        if not self.store.try_begin_upload(upload_id):
            logger.warning("Document upload refused, another upload is in progress")
            raise ServiceError(
                ErrorCode.UPLOAD_IN_PROGRESS,
                "An upload is already in progress. Please wait for it to finish "
                "before sending another file.",
            )

        try:
            record = await self._process(upload_id, stream, declared_name)
        except ServiceError as exc:
            logger.warning(
                "Document upload rejected: id=%s code=%s name=%s",
                upload_id, exc.code.value, declared_name,
            )
            raise
        except Exception as exc:
            logger.exception("Document upload failed: id=%s", upload_id)
            raise ServiceError(
                ErrorCode.UPLOAD_FAILED,
                "A server error occurred while processing your file. Please try again later",
                describe_cause(exc),
            ) from exc
        finally:
            self.store.clear_upload_in_progress()

        return record.to_response()

    async def _process(
        self,
        upload_id: str,
        stream: AsyncIterable[bytes],
        declared_name: str | None,
    ) -> DocumentRecord:
        content = await read_limited(stream, self.max_file_size, kind="PDF")

        if not has_pdf_signature(content):
            raise ServiceError(
                ErrorCode.INVALID_FILE_TYPE,
                "The selected file is not a PDF. Please select a file with the .pdf extension",
            )

        report = inspect_pdf(content)
        if not report.valid:
            corruption = report.corruption
            raise ServiceError(
                ErrorCode.CORRUPTED_FILE,
                f"The PDF file is corrupted: {corruption.message}",
                {"corruption_kind": corruption.kind.value},
            )

        scan = await self.scanner.scan(content)
        if scan.outcome == ScanResult.INFECTED:
            logger.warning(
                "Malware detected: id=%s engine=%s detail=%s",
                upload_id, scan.engine, scan.detail,
            )
            raise ServiceError(
                ErrorCode.MALWARE_DETECTED,
                "The file contains malware and was rejected for security reasons",
            )

        record = DocumentRecord(
            id=upload_id,
            original_name=declared_name or DEFAULT_DOCUMENT_NAME,
            mime_type=PDF_MIME_TYPE,
            size_bytes=len(content),
            size_formatted=format_file_size(len(content)),
            raw_bytes=content,
            integrity_valid=True,
            corruption_kind=None,
            scan_result=scan.outcome,
            access_token=self.token_issuer.issue(upload_id),
            lifecycle_state=LifecycleState.COMPLETED,
        )

        if scan.outcome == ScanResult.SCAN_UNAVAILABLE:
            self.store.add_to_quarantine(record)
            logger.warning(
                "Document quarantined: id=%s name=%s detail=%s",
                record.id, record.original_name, scan.detail,
            )
        else:
            self.store.add(record)
            logger.info(
                "Document accepted: id=%s name=%s size=%s scan=%s engine=%s",
                record.id, record.original_name, record.size_bytes,
                scan.outcome.value, scan.engine,
            )
        return record
