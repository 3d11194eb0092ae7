import asyncio

from fastapi import APIRouter, Depends, Request

from intake.conversion import ConversionEngine
from intake.responses import success_response

router = APIRouter(
    prefix="/api/internal/png-conversion",
    tags=["PNG Conversion"],
)


def get_conversion_engine(request: Request) -> ConversionEngine:
    return request.app.state.conversion_engine


@router.post("", summary="Convert a stored PNG to a base64 data URL")
async def convert_png(
    request: Request,
    engine: ConversionEngine = Depends(get_conversion_engine),
):
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    file_id = payload.get("file_id") if isinstance(payload, dict) else None

    # Encoding a 10MB image is CPU bound; keep it off the event loop.
    result = await asyncio.to_thread(engine.convert, file_id)
    return success_response(result.model_dump(mode="json"))
