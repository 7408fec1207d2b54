"""
backend/routers/catalog.py
──────────────────────────
Public catalog endpoints.

Endpoints
─────────
GET  /catalog/universities    — Filtered university listing
GET  /catalog/configuration   — Intents, weight presets, verification flags
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_configuration_store, get_university_catalog
from backend.schemas import UniversityCatalogResponse, UniversityOut
from models.catalog import CatalogConfiguration
from models.repositories import ConfigurationStore, UniversityCatalog

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/universities", response_model=UniversityCatalogResponse, summary="List university catalog")
def list_universities(
    search: Optional[str] = Query(None, description="Free text search over name, city, region"),
    program: Optional[str] = Query(None, description="Filter by program name"),
    country: Optional[str] = Query(None, description="Filter by country code"),
    limit: int = Query(20, ge=1, le=50, description="Maximum results to return"),
    catalog: UniversityCatalog = Depends(get_university_catalog),
) -> UniversityCatalogResponse:
    rows = catalog.list(search=search, program=program, country=country, limit=limit)
    return UniversityCatalogResponse(
        total=len(rows),
        results=[UniversityOut.from_university(u) for u in rows],
    )


@router.get(
    "/configuration",
    response_model=CatalogConfiguration,
    response_model_by_alias=True,
    summary="Catalog configuration for the onboarding screens",
)
def get_configuration(
    store: ConfigurationStore = Depends(get_configuration_store),
) -> CatalogConfiguration:
    return store.get_catalog_configuration()
