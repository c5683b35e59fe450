"""Catalog API endpoints."""

from fastapi import APIRouter, Depends, Request

from src.services.catalog_service import CatalogService

router = APIRouter(prefix="/catalog", tags=["catalog"])


def get_catalog_service(request: Request) -> CatalogService:
    """CatalogService instance (dependency injection)"""
    service: CatalogService = request.app.state.catalog_service
    return service


@router.post("/reload")
def reload_catalog(service: CatalogService = Depends(get_catalog_service)) -> dict[str, int]:
    """Reload every JSON catalog and drop cached results. Returns per-file counts."""
    return service.reload()
