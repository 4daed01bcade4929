"""Health check endpoint: no dependencies, always available."""

from fastapi import APIRouter

from storefront.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Returns the current application health status and the upstream it reads from."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "remote_api": settings.remote_api_base_url,
    }
