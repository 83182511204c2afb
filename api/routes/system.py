"""
Service info, health and Prometheus endpoints.
"""

from fastapi import APIRouter

from config.settings import get_settings
from ..middleware.metrics import metrics_endpoint
from ..services import get_services

router = APIRouter()

router.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


@router.get("/")
async def root():
    settings = get_settings()
    return {
        "service": f"{settings.brand_name} Assistant",
        "version": settings.api_version,
        "status": "operational",
        "docs": "/docs",
    }


@router.get("/health")
async def health():
    """Degraded when no model is configured; chat then answers 503."""
    services = get_services()
    return {
        "status": "healthy" if services.is_ready else "degraded",
        "services": services.health(),
    }
