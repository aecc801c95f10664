"""FastAPI unit catalog endpoints.

GET  /v1/projects/{project}/units                               — list (optionally by quantity)
GET  /v1/projects/{project}/units/by-alias                      — lookup by quantity + alias
GET  /v1/projects/{project}/units/{external_id}                 — lookup by externalId
GET  /v1/projects/{project}/systems                             — list unit systems
GET  /v1/projects/{project}/systems/{system}/units/{external_id} — canonical unit in a system
POST /v1/projects/{project}/convert                             — convert a value

The project "global" addresses the global partition; other projects are
loaded on first use. Read-only: the catalog never changes after load.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from unitcatalog.api.dependencies import get_project_catalog, get_service
from unitcatalog.catalog.index import CatalogIndex
from unitcatalog.catalog.service import UnitService
from unitcatalog.engine.conversion import ConversionMode
from unitcatalog.errors import IncompatibleQuantities, NotFound
from unitcatalog.models.common import UnitCatalogBase

router = APIRouter(prefix="/v1/projects", tags=["units"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class UnitListResponse(BaseModel):
    items: list[dict]


class SystemListResponse(BaseModel):
    items: list[dict]


class ConvertRequest(UnitCatalogBase):
    from_external_id: str
    to_external_id: str
    value: float
    mode: ConversionMode = ConversionMode.AFFINE


class ConvertResponse(UnitCatalogBase):
    from_external_id: str
    to_external_id: str
    mode: ConversionMode
    value: float = Field(..., description="Converted value.")


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------


@router.get("/{project}/units", response_model=UnitListResponse)
async def list_units(
    quantity: str | None = Query(default=None),
    catalog: CatalogIndex = Depends(get_project_catalog),
) -> UnitListResponse:
    if quantity is None:
        units = catalog.units
    else:
        try:
            units = catalog.get_units_by_quantity(quantity)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail=exc.message) from exc
    return UnitListResponse(items=[u.to_payload() for u in units])


@router.get("/{project}/units/by-alias")
async def get_unit_by_alias(
    quantity: str = Query(...),
    alias: str = Query(...),
    catalog: CatalogIndex = Depends(get_project_catalog),
) -> dict:
    try:
        unit = catalog.get_unit_by_quantity_and_alias(quantity, alias)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return unit.to_payload()


@router.get("/{project}/units/{external_id}")
async def get_unit(
    external_id: str,
    catalog: CatalogIndex = Depends(get_project_catalog),
) -> dict:
    try:
        unit = catalog.get_unit_by_external_id(external_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return unit.to_payload()


# ---------------------------------------------------------------------------
# Systems
# ---------------------------------------------------------------------------


@router.get("/{project}/systems", response_model=SystemListResponse)
async def list_systems(
    catalog: CatalogIndex = Depends(get_project_catalog),
) -> SystemListResponse:
    return SystemListResponse(items=[s.to_payload() for s in catalog.systems])


@router.get("/{project}/systems/{system}/units/{external_id}")
async def get_unit_by_system(
    system: str,
    external_id: str,
    catalog: CatalogIndex = Depends(get_project_catalog),
) -> dict:
    try:
        source_unit = catalog.get_unit_by_external_id(external_id)
        unit = catalog.get_unit_by_system(source_unit, system)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return unit.to_payload()


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


@router.post("/{project}/convert", response_model=ConvertResponse, response_model_by_alias=True)
async def convert_value(
    body: ConvertRequest,
    catalog: CatalogIndex = Depends(get_project_catalog),
    service: UnitService = Depends(get_service),
) -> ConvertResponse:
    try:
        unit_from = catalog.get_unit_by_external_id(body.from_external_id)
        unit_to = catalog.get_unit_by_external_id(body.to_external_id)
        value = service.convert_value(unit_from, unit_to, body.value, mode=body.mode)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except IncompatibleQuantities as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    return ConvertResponse(
        from_external_id=unit_from.external_id,
        to_external_id=unit_to.external_id,
        mode=body.mode,
        value=value,
    )
