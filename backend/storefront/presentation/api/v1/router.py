"""V1 API router: aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from storefront.presentation.api.v1.endpoints.health import router as health_router
from storefront.presentation.api.v1.endpoints.cache import router as cache_router
from storefront.presentation.api.v1.endpoints.entities import router as entities_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(cache_router)
router.include_router(entities_router)
