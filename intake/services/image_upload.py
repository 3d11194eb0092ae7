from collections.abc import AsyncIterable
from typing import Any
import logging

from intake.binary import OutOfBoundsError
from intake.config import DEFAULT_IMAGE_NAME, IMAGE_MAX_FILE_SIZE_BYTES, PNG_MIME_TYPE
from intake.conversion import encode_data_url
from intake.errors import ErrorCode, ServiceError, describe_cause
from intake.models import ImageRecord, format_file_size
from intake.services.base import RecordService
from intake.size_guard import read_limited
from intake.store import ImageStore
from intake.validators import has_png_signature, inspect_png

logger = logging.getLogger("intake.images")


class ImageUploadService(RecordService[ImageRecord]):
    """
    PNG pipeline: size guard, signature, IHDR header, store.

    Image uploads have no scan stage and no in-flight gate, so any number may
    run concurrently, each with its own buffer.
    """

    def __init__(
        self,
        store: ImageStore,
        max_file_size: int = IMAGE_MAX_FILE_SIZE_BYTES,
    ) -> None:
        super().__init__(store)
        self.max_file_size = max_file_size

    async def upload(
        self,
        stream: AsyncIterable[bytes],
        declared_name: str | None = None,
    ) -> dict[str, Any]:
        try:
            content = await read_limited(stream, self.max_file_size, kind="PNG")

            if not has_png_signature(content):
                raise ServiceError(
                    ErrorCode.INVALID_FILE_TYPE,
                    "The selected file is not a PNG. Please select a file with the .png extension",
                )

            try:
                header = inspect_png(content)
            except OutOfBoundsError as exc:
                raise ServiceError(
                    ErrorCode.CORRUPTED_FILE,
                    "The selected PNG file appears to be corrupted or is not a valid PNG",
                ) from exc

            record = ImageRecord(
                original_name=declared_name or DEFAULT_IMAGE_NAME,
                mime_type=PNG_MIME_TYPE,
                size_bytes=len(content),
                size_formatted=format_file_size(len(content)),
                raw_bytes=content,
                width=header.width,
                height=header.height,
                dimensions=f"{header.width} x {header.height}",
                preview_url=encode_data_url(content, PNG_MIME_TYPE),
            )
            self.store.add(record)
        except ServiceError as exc:
            logger.warning("Image upload rejected: code=%s name=%s", exc.code.value, declared_name)
            raise
        except Exception as exc:
            logger.exception("Image upload failed for %s", declared_name)
            raise ServiceError(
                ErrorCode.UPLOAD_FAILED,
                "A server error occurred while processing your file. Please try again later",
                describe_cause(exc),
            ) from exc

        logger.info(
            "Image accepted: id=%s name=%s size=%s dimensions=%s",
            record.id, record.original_name, record.size_bytes, record.dimensions,
        )
        return record.to_response()
