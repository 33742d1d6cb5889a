"""Health Check Endpoint"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response

from rbac_tools.api.dependencies import get_catalog_registry
from rbac_tools.core.config import settings
from rbac_tools.core.exceptions import CatalogUnavailableError
from rbac_tools.core.monitoring import get_metrics, get_metrics_content_type
from rbac_tools.rbac.catalog import CatalogRegistry, CatalogStore

router = APIRouter(tags=["health"])


async def check_catalog(store: CatalogStore) -> bool:
    """Check that a role catalog can be served"""
    try:
        snapshot = await store.get()
    except CatalogUnavailableError:
        return False
    return len(snapshot) > 0


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(
    registry: CatalogRegistry = Depends(get_catalog_registry)
) -> JSONResponse:
    """
    Health check endpoint that verifies every role catalog.

    Returns:
        200 OK if all catalogs are available
        503 Service Unavailable if any catalog is unavailable
    """
    checks = {store.system.value: await check_catalog(store) for store in registry}

    all_healthy = all(checks.values())

    response_data: Dict[str, Any] = {
        "status": "healthy" if all_healthy else "unhealthy",
        "catalogs": checks,
        "version": settings.APP_VERSION
    }

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response_data
    )


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping by Prometheus server.
    """
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )
