"""FastAPI dependency injection factories.

Endpoints resolve the service and the requested partition through these so
tests can swap in a service built from fixture catalogs.
"""

import httpx
from fastapi import Depends, HTTPException

from unitcatalog.catalog.index import CatalogIndex
from unitcatalog.catalog.service import UnitService, get_unit_service
from unitcatalog.errors import CatalogValidationError, UnknownPartition


async def get_service() -> UnitService:
    return get_unit_service()


async def get_project_catalog(
    project: str,
    service: UnitService = Depends(get_service),
) -> CatalogIndex:
    """Resolve the ``{project}`` path segment to a loaded catalog partition."""
    try:
        return await service.get_catalog(project)
    except UnknownPartition as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except CatalogValidationError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"Catalog for project '{project}' is invalid: {exc.message}",
        ) from exc
    except httpx.HTTPError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"Catalog for project '{project}' could not be fetched.",
        ) from exc
