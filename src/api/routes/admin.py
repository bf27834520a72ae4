"""
Admin / observability endpoints
===============================

GET  /api/v1/admin/health -- availability mode and read-only flag
POST /api/v1/admin/reload -- start a fresh load cycle (re-attempts LIVE)
"""

from fastapi import APIRouter, Request

from src.api.middleware import limiter
from src.api.schemas import HealthResponse
from src.services.session import CatalogSession

router = APIRouter(prefix="/admin", tags=["admin"])


def _health(catalog: CatalogSession) -> HealthResponse:
    return HealthResponse(mode=catalog.mode.value, read_only=catalog.read_only)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request):
    return _health(request.app.state.catalog)


@router.post(
    "/reload",
    response_model=HealthResponse,
    summary="Reload the ride catalog",
    description=(
        "Drops the current collection and loads again from the store. "
        "This is the only way out of demo mode once the database exists."
    ),
)
@limiter.limit("10/minute")
async def reload_catalog(request: Request):
    catalog: CatalogSession = request.app.state.catalog
    await catalog.load()
    return _health(catalog)
