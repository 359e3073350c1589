from fastapi import APIRouter, Depends

from podboard_api.core.config import Settings
from podboard_api.core.services import get_app_settings
from podboard_api.schemas.v1.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.version,
        providers={
            "metadata": settings.metadata_provider,
            "transcript": settings.transcript_provider,
            "segmenter": settings.segmenter_provider,
        },
    )
