"""Catalog loader — raw units / unit-systems documents into a CatalogIndex.

Provides:
  load_units(raw_units, builder)
  load_systems(raw_systems, builder)
  load_catalog(raw_units, raw_systems, ...) -> CatalogIndex
  load_catalog_document(raw_document, ...) -> CatalogIndex
  load_catalog_files(units_path, systems_path, ...) -> CatalogIndex

Checks, in order, for every unit:
  1. Syntax: every record has the required keys with the right types.
  2. Unique IDs: externalIds are unique within the partition.
  3. externalId format and source reference (see ``validator``).
  4. Unique aliases: (quantity, alias) pairs are unique.
and for every unit system:
  5. Unique system names.
  6. Every referenced unit externalId exists.
  7. Every referenced quantity has units.
  8. The default system exists and binds every quantity.

The first violation aborts the load; no partial catalog is published.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from unitcatalog.catalog.index import CatalogIndex, CatalogIndexBuilder
from unitcatalog.catalog.validator import validate_unit
from unitcatalog.errors import (
    DuplicateExternalId,
    IncompleteDefaultSystem,
    MalformedCatalog,
    MissingDefaultSystem,
)
from unitcatalog.models.unit import Unit, UnitSystem

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM = "Default"
GLOBAL_PARTITION = "global"

RawDocument = str | bytes | list[Any]

_UNITS = TypeAdapter(list[Unit])
_SYSTEMS = TypeAdapter(list[UnitSystem])


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse(adapter: TypeAdapter, raw: RawDocument, kind: str) -> list:
    try:
        if isinstance(raw, (str, bytes)):
            return adapter.validate_json(raw)
        return adapter.validate_python(raw)
    except ValidationError as exc:
        msg = f"Malformed {kind} document: {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}"
        raise MalformedCatalog(msg) from exc


def parse_units(raw_units: RawDocument) -> list[Unit]:
    """Deserialize a units document.

    Raises:
        MalformedCatalog: a record is missing a required field or mistyped.
    """
    return _parse(_UNITS, raw_units, "units")


def parse_systems(raw_systems: RawDocument) -> list[UnitSystem]:
    """Deserialize a unit-systems document.

    Raises:
        MalformedCatalog: a record is missing a required field or mistyped.
    """
    return _parse(_SYSTEMS, raw_systems, "unit systems")


# ---------------------------------------------------------------------------
# Loading into a builder
# ---------------------------------------------------------------------------


def load_units(raw_units: RawDocument, builder: CatalogIndexBuilder) -> int:
    """Validate and index every unit, in input order. Returns the unit count."""
    units = parse_units(raw_units)
    for unit in units:
        if builder.has_unit(unit.external_id):
            raise DuplicateExternalId(unit.external_id)
        validate_unit(unit)
        builder.add_unit(unit)

    logger.info(
        "Partition %s: loaded %d units across %d quantities",
        builder.partition, len(units), len(builder.quantities),
    )
    return len(units)


def load_systems(raw_systems: RawDocument, builder: CatalogIndexBuilder) -> int:
    """Resolve and index every unit system, then check the default system.

    Units must already be loaded into ``builder``. Returns the system count.
    """
    systems = parse_systems(raw_systems)
    for system in systems:
        builder.add_system(system)

    default_system = builder.default_system
    if not builder.has_system(default_system):
        raise MissingDefaultSystem(default_system)

    bound = builder.bound_quantities(default_system)
    missing = [q for q in builder.quantities if q not in bound]
    if missing:
        raise IncompleteDefaultSystem(default_system, missing)

    logger.info("Partition %s: loaded %d unit systems", builder.partition, len(systems))
    return len(systems)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def load_catalog(
    raw_units: RawDocument,
    raw_systems: RawDocument,
    *,
    partition: str = GLOBAL_PARTITION,
    default_system: str = DEFAULT_SYSTEM,
) -> CatalogIndex:
    """Load units, then systems, and publish a frozen index.

    Raises:
        CatalogValidationError: any integrity rule is violated.
    """
    builder = CatalogIndexBuilder(partition=partition, default_system=default_system)
    load_units(raw_units, builder)
    load_systems(raw_systems, builder)
    return builder.build()


def load_catalog_document(
    raw_document: str | bytes | dict[str, Any],
    *,
    partition: str,
    default_system: str = DEFAULT_SYSTEM,
) -> CatalogIndex:
    """Load a single-payload catalog: ``{"units": [...], "unitSystems": [...]}``.

    This is the format delivered by project catalog sources.
    """
    if isinstance(raw_document, (str, bytes)):
        try:
            document = json.loads(raw_document)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"Malformed catalog document for {partition}: {exc}"
            raise MalformedCatalog(msg) from exc
    else:
        document = raw_document

    if not isinstance(document, dict):
        msg = f"Catalog document for {partition} must be a JSON object"
        raise MalformedCatalog(msg)
    for key in ("units", "unitSystems"):
        if key not in document:
            msg = f"Catalog document for {partition} is missing '{key}'"
            raise MalformedCatalog(msg)

    return load_catalog(
        document["units"],
        document["unitSystems"],
        partition=partition,
        default_system=default_system,
    )


def load_catalog_files(
    units_path: str | Path,
    systems_path: str | Path,
    *,
    partition: str = GLOBAL_PARTITION,
    default_system: str = DEFAULT_SYSTEM,
) -> CatalogIndex:
    """Load a catalog from a units file and a unit-systems file.

    Raises:
        FileNotFoundError: If either path does not exist.
        CatalogValidationError: any integrity rule is violated.
    """
    units_text = Path(units_path).read_text(encoding="utf-8")
    systems_text = Path(systems_path).read_text(encoding="utf-8")
    return load_catalog(
        units_text,
        systems_text,
        partition=partition,
        default_system=default_system,
    )
