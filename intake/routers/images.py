from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from intake.responses import success_response
from intake.services.image_upload import ImageUploadService

router = APIRouter(
    prefix="/api/internal/file-upload",
    tags=["Image Upload"],
)


def get_image_service(request: Request) -> ImageUploadService:
    return request.app.state.image_service


@router.post("", summary="Upload a PNG image (raw body, name in X-File-Name)")
async def upload_image(
    request: Request,
    service: ImageUploadService = Depends(get_image_service),
):
    data = await service.upload(request.stream(), request.headers.get("x-file-name"))
    return JSONResponse(status_code=201, content=success_response(data))


@router.get("/{file_id}", summary="Get an uploaded image")
async def get_image(file_id: str, service: ImageUploadService = Depends(get_image_service)):
    return success_response(service.get(file_id))


@router.delete("/{file_id}", summary="Cancel/delete an uploaded image")
async def cancel_image(file_id: str, service: ImageUploadService = Depends(get_image_service)):
    return success_response(service.cancel(file_id))
