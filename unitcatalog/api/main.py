"""FastAPI application entry point for the unit catalog service."""

import logging

import structlog
from fastapi import Depends, FastAPI

from unitcatalog.api.dependencies import get_service
from unitcatalog.api.units import router as units_router
from unitcatalog.catalog.service import UnitService
from unitcatalog.config.settings import get_settings

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="Unit Catalog API",
    description="Unit-of-measure catalog lookup and conversion.",
    version=APP_VERSION,
)

app.include_router(units_router)


@app.get("/health")
async def health(service: UnitService = Depends(get_service)) -> dict:
    """Liveness plus a summary of loaded partitions."""
    catalog = service.catalog
    return {
        "status": "ok",
        "version": APP_VERSION,
        "global_partition": service.global_partition,
        "unit_count": len(catalog.units),
        "quantity_count": len(catalog.quantities),
        "system_count": len(catalog.systems),
        "loaded_partitions": service.loaded_partitions,
    }
