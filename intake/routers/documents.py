from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from intake.responses import success_response
from intake.services.document_upload import DocumentUploadService

router = APIRouter(
    prefix="/api/internal/pdf-upload",
    tags=["PDF Upload"],
)


def get_document_service(request: Request) -> DocumentUploadService:
    return request.app.state.document_service


@router.post("", summary="Upload a PDF document (raw body, name in X-File-Name)")
async def upload_document(
    request: Request,
    service: DocumentUploadService = Depends(get_document_service),
):
    data = await service.upload(request.stream(), request.headers.get("x-file-name"))
    return JSONResponse(status_code=201, content=success_response(data))


@router.get("/{file_id}", summary="Get an uploaded PDF document")
async def get_document(
    file_id: str,
    service: DocumentUploadService = Depends(get_document_service),
):
    return success_response(service.get(file_id))


@router.delete("/{file_id}", summary="Cancel/delete an uploaded PDF document")
async def cancel_document(
    file_id: str,
    service: DocumentUploadService = Depends(get_document_service),
):
    return success_response(service.cancel(file_id))
