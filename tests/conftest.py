"""Shared pytest fixtures for the unit catalog test suite.

Provides:
- unit_record / system_record: wire-format record builder factories
- small_units / small_systems: a minimal valid Temperature + Length catalog
- bundled_catalog: the shipped global catalog, loaded once per session
- service: UnitService over the bundled catalog with no project source
"""

from __future__ import annotations

import pytest

from unitcatalog.catalog.index import CatalogIndex
from unitcatalog.catalog.loader import load_catalog_files
from unitcatalog.catalog.service import UnitService
from unitcatalog.config.settings import DATA_DIR, Settings


def make_unit_record(
    name: str,
    quantity: str,
    *,
    multiplier: float = 1.0,
    offset: float = 0.0,
    aliases: list[str] | None = None,
    external_id: str | None = None,
    source: str | None = "qudt.org",
    source_reference: str | None = None,
    **overrides: object,
) -> dict:
    """Build a units.json record that passes validation unless overridden."""
    if external_id is None:
        quantity_part = quantity.lower().replace(" ", "_")
        external_id = f"{quantity_part}:{name.lower()}"
    if source == "qudt.org" and source_reference is None:
        source_reference = f"https://qudt.org/vocab/unit/{name}"
    record: dict = {
        "externalId": external_id,
        "name": name,
        "longName": name.lower(),
        "symbol": name,
        "aliasNames": aliases if aliases is not None else [name],
        "quantity": quantity,
        "conversion": {"multiplier": multiplier, "offset": offset},
        "source": source,
        "sourceReference": source_reference,
    }
    record.update(overrides)
    return record


def make_system_record(name: str, bindings: dict[str, str]) -> dict:
    return {
        "name": name,
        "quantities": [
            {"name": quantity, "unitExternalId": external_id}
            for quantity, external_id in bindings.items()
        ],
    }


@pytest.fixture
def small_units() -> list[dict]:
    return [
        make_unit_record(
            "DEG_C", "Temperature", offset=273.15, aliases=["degC", "°C", "°C"],
        ),
        make_unit_record(
            "DEG_F", "Temperature",
            multiplier=0.5555555555555556, offset=459.67, aliases=["degF", "°F"],
        ),
        make_unit_record("M", "Length", aliases=["m", "meter"]),
        make_unit_record("FT", "Length", multiplier=0.3048, aliases=["ft", "foot"]),
    ]


@pytest.fixture
def small_systems() -> list[dict]:
    return [
        make_system_record(
            "Default", {"Temperature": "temperature:deg_c", "Length": "length:m"},
        ),
        make_system_record("Imperial", {"Temperature": "temperature:deg_f"}),
    ]


@pytest.fixture(scope="session")
def bundled_catalog() -> CatalogIndex:
    return load_catalog_files(DATA_DIR / "units.json", DATA_DIR / "unitSystems.json")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def service(bundled_catalog: CatalogIndex, settings: Settings) -> UnitService:
    return UnitService(bundled_catalog, settings=settings)


@pytest.fixture
def unit_record():
    """Factory fixture: ``unit_record(name, quantity, **kwargs) -> dict``."""
    return make_unit_record


@pytest.fixture
def system_record():
    """Factory fixture: ``system_record(name, {quantity: externalId}) -> dict``."""
    return make_system_record
