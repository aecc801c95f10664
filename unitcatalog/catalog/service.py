"""UnitService — the global catalog plus lazily loaded project partitions.

The global partition is loaded eagerly when the service is built. Any other
partition is fetched from a ``CatalogSource`` on first access and cached for
the process lifetime.

Partition states:
  not loaded: no entry in either map
  loading:    a shared asyncio.Task in ``_loading``; later callers await it
  loaded:     a frozen CatalogIndex in ``_partitions``

Concurrent first access to the same partition shares one fetch and one
validation pass. A failed load is not cached, so the next call retries.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from unitcatalog.catalog.index import CatalogIndex
from unitcatalog.catalog.loader import load_catalog_document, load_catalog_files
from unitcatalog.catalog.sources import CatalogSource, HttpCatalogSource
from unitcatalog.config.settings import Settings, get_settings
from unitcatalog.engine.conversion import (
    ConversionMode,
    convert,
    convert_multiplier,
    convert_square_multiplier,
    convert_value,
    verify_is_convertible,
)
from unitcatalog.errors import UnknownPartition
from unitcatalog.models.unit import Unit

logger = logging.getLogger(__name__)


class UnitService:
    """Catalog lookups and conversions across partitions."""

    def __init__(
        self,
        global_catalog: CatalogIndex,
        *,
        source: CatalogSource | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._global_name = global_catalog.partition
        self._source = source
        self._partitions: dict[str, CatalogIndex] = {self._global_name: global_catalog}
        self._loading: dict[str, asyncio.Task[CatalogIndex]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        source: CatalogSource | None = None,
    ) -> UnitService:
        """Load the global catalog from the configured files.

        An ``HttpCatalogSource`` is attached when ``PARTITION_SOURCE_URL``
        is set and no explicit ``source`` is given.
        """
        settings = settings or get_settings()
        global_catalog = load_catalog_files(
            settings.UNITS_PATH,
            settings.UNIT_SYSTEMS_PATH,
            partition=settings.GLOBAL_PARTITION_NAME,
            default_system=settings.DEFAULT_SYSTEM_NAME,
        )
        if source is None and settings.partitions_enabled:
            source = HttpCatalogSource(
                settings.PARTITION_SOURCE_URL,
                timeout=settings.PARTITION_FETCH_TIMEOUT_S,
            )
        return cls(global_catalog, source=source, settings=settings)

    # -- Partitions ----------------------------------------------------------

    @property
    def catalog(self) -> CatalogIndex:
        """The global partition."""
        return self._partitions[self._global_name]

    @property
    def global_partition(self) -> str:
        return self._global_name

    @property
    def loaded_partitions(self) -> list[str]:
        return list(self._partitions)

    async def get_catalog(self, partition: str | None = None) -> CatalogIndex:
        """Return the loaded index for ``partition``, loading it on first use.

        Raises:
            UnknownPartition: no source is configured, or it has no such partition.
            CatalogValidationError: the fetched catalog is invalid.
        """
        name = self._global_name if partition is None else partition
        catalog = self._partitions.get(name)
        if catalog is not None:
            return catalog
        if self._source is None:
            raise UnknownPartition(name)

        task = self._loading.get(name)
        if task is None:
            task = asyncio.ensure_future(self._load_partition(name, self._source))
            # Failures are logged in _load_partition; callers may all be gone.
            task.add_done_callback(_consume_load_error)
            self._loading[name] = task
        # shield: one caller being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def _load_partition(self, name: str, source: CatalogSource) -> CatalogIndex:
        logger.info("Loading catalog partition %s from %s source", name, source.name)
        try:
            document = await source.fetch(name)
            catalog = load_catalog_document(
                document,
                partition=name,
                default_system=self._settings.DEFAULT_SYSTEM_NAME,
            )
        except Exception:
            logger.warning("Catalog partition %s failed to load", name, exc_info=True)
            raise
        finally:
            self._loading.pop(name, None)

        # A completed load for an already published partition is a no-op.
        published = self._partitions.setdefault(name, catalog)
        logger.info(
            "Catalog partition %s loaded: %d units, %d systems",
            name, len(published.units), len(published.systems),
        )
        return published

    # -- Conversions ---------------------------------------------------------

    @property
    def significant_digits(self) -> int:
        return self._settings.SIGNIFICANT_DIGITS

    def verify_is_convertible(self, unit_from: Unit, unit_to: Unit) -> None:
        verify_is_convertible(unit_from, unit_to)

    def convert(self, unit_from: Unit, unit_to: Unit, value: float) -> float:
        return convert(unit_from, unit_to, value, significant_digits=self.significant_digits)

    def convert_multiplier(self, unit_from: Unit, unit_to: Unit, value: float) -> float:
        return convert_multiplier(
            unit_from, unit_to, value, significant_digits=self.significant_digits,
        )

    def convert_square_multiplier(self, unit_from: Unit, unit_to: Unit, value: float) -> float:
        return convert_square_multiplier(
            unit_from, unit_to, value, significant_digits=self.significant_digits,
        )

    def convert_value(
        self,
        unit_from: Unit,
        unit_to: Unit,
        value: float,
        *,
        mode: ConversionMode = ConversionMode.AFFINE,
    ) -> float:
        return convert_value(
            unit_from, unit_to, value, mode=mode, significant_digits=self.significant_digits,
        )


def _consume_load_error(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_service: UnitService | None = None
_service_lock = threading.Lock()


def get_unit_service() -> UnitService:
    """Return the process-wide service, loading the global catalog once.

    Safe under concurrent first access from several threads.
    """
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = UnitService.from_settings()
    return _service
