import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from intake.conversion import ConversionEngine
from intake.errors import ErrorCode, ServiceError
from intake.logging_config import setup_logging
from intake.routers import conversion, documents, images
from intake.scanner import ScanCoordinator, build_scan_coordinator
from intake.services.document_upload import DocumentUploadService
from intake.services.image_upload import ImageUploadService
from intake.store import DocumentStore, ImageStore
from intake.tokens import AccessTokenIssuer

logger = logging.getLogger("intake")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.warning(
        "service_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "code": exc.code.value,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ServiceError(
        ErrorCode.VALIDATION_ERROR,
        "Invalid request",
        {"errors": [e.get("msg") for e in exc.errors()]},
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {"code": "INTERNAL_ERROR", "message": "Unhandled exception", "details": None},
        },
    )


def create_app(scanner: ScanCoordinator | None = None) -> FastAPI:
    """Build the API with its own stores; each call yields an independent instance."""
    app = FastAPI(title="Intake Upload API")

    image_store = ImageStore()
    document_store = DocumentStore()

    app.state.image_store = image_store
    app.state.document_store = document_store
    app.state.image_service = ImageUploadService(image_store)
    app.state.document_service = DocumentUploadService(
        document_store,
        scanner or build_scan_coordinator(),
        AccessTokenIssuer(),
    )
    app.state.conversion_engine = ConversionEngine(image_store)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(images.router)
    app.include_router(documents.router)
    app.include_router(conversion.router)

    @app.on_event("startup")
    def startup():
        setup_logging()

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "images_stored": image_store.count(),
            "documents_stored": document_store.count(),
            "documents_quarantined": len(document_store.get_quarantined()),
            "document_upload_in_progress": document_store.has_upload_in_progress(),
        }

    return app


app = create_app()
