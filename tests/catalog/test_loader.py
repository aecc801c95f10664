"""Tests for catalog loading: parsing, integrity checks, default-system rules."""

from __future__ import annotations

import json

import pytest

from unitcatalog.catalog.index import CatalogIndex, CatalogIndexBuilder
from unitcatalog.catalog.loader import (
    load_catalog,
    load_catalog_document,
    load_catalog_files,
    load_units,
    parse_units,
)
from unitcatalog.errors import (
    CatalogValidationError,
    DuplicateAlias,
    DuplicateExternalId,
    DuplicateSystem,
    IncompleteDefaultSystem,
    InvalidConversion,
    InvalidExternalId,
    MalformedCatalog,
    MissingDefaultSystem,
    UnknownQuantityReference,
    UnknownUnitReference,
)


# ===================================================================
# Happy path
# ===================================================================


class TestLoadCatalog:
    """A valid units + systems pair produces a frozen index."""

    def test_loads_small_catalog(self, small_units, small_systems) -> None:
        catalog = load_catalog(small_units, small_systems)
        assert isinstance(catalog, CatalogIndex)
        assert catalog.partition == "global"
        assert catalog.default_system == "Default"
        assert [u.external_id for u in catalog.units] == [
            "temperature:deg_c",
            "temperature:deg_f",
            "length:m",
            "length:ft",
        ]
        assert catalog.quantities == ["Temperature", "Length"]
        assert [s.name for s in catalog.systems] == ["Default", "Imperial"]

    def test_accepts_json_text(self, small_units, small_systems) -> None:
        catalog = load_catalog(json.dumps(small_units), json.dumps(small_systems).encode())
        assert len(catalog.units) == 4

    def test_partition_name_is_kept(self, small_units, small_systems) -> None:
        catalog = load_catalog(small_units, small_systems, partition="acme")
        assert catalog.partition == "acme"

    def test_duplicate_alias_within_one_unit_is_tolerated(
        self, small_units, small_systems,
    ) -> None:
        # DEG_C lists "°C" twice (escaped and literal forms decode the same)
        catalog = load_catalog(small_units, small_systems)
        deg_c = catalog.get_unit_by_quantity_and_alias("Temperature", "°C")
        assert deg_c.external_id == "temperature:deg_c"
        assert deg_c.unique_alias_names == ("degC", "°C")

    def test_unknown_fields_are_ignored(self, small_units, small_systems) -> None:
        small_units[0]["deprecated"] = True
        catalog = load_catalog(small_units, small_systems)
        assert catalog.has_unit("temperature:deg_c")

    def test_same_alias_in_different_quantities(
        self, unit_record, system_record,
    ) -> None:
        units = [
            unit_record("M", "Length", aliases=["m"]),
            unit_record("MIN", "Time", aliases=["m", "min"]),
        ]
        systems = [system_record("Default", {"Length": "length:m", "Time": "time:min"})]
        catalog = load_catalog(units, systems)
        assert catalog.get_unit_by_quantity_and_alias("Length", "m").name == "M"
        assert catalog.get_unit_by_quantity_and_alias("Time", "m").name == "MIN"


# ===================================================================
# Unit integrity
# ===================================================================


class TestUnitIntegrity:
    """Every unit-level violation aborts the load."""

    def test_duplicate_external_id(self, unit_record, small_systems) -> None:
        units = [
            unit_record("DEG", "Temperature", aliases=["a"]),
            unit_record("DEG", "Temperature", aliases=["b"]),
        ]
        with pytest.raises(DuplicateExternalId) as exc_info:
            load_catalog(units, small_systems)
        assert str(exc_info.value) == "Duplicate externalId temperature:deg"

    def test_duplicate_alias_within_quantity(self, unit_record, small_systems) -> None:
        units = [
            unit_record("DEG_C", "Temperature", aliases=["degrees", "degC"]),
            unit_record("DEG_F", "Temperature", aliases=["degF", "degrees"]),
        ]
        with pytest.raises(DuplicateAlias) as exc_info:
            load_catalog(units, small_systems)
        assert str(exc_info.value) == "Duplicate alias degrees for quantity Temperature"
        assert exc_info.value.alias == "degrees"

    def test_invalid_external_id_aborts(self, unit_record, small_systems) -> None:
        units = [unit_record("DEG_C", "Temperature", external_id="temp:deg_c")]
        with pytest.raises(InvalidExternalId):
            load_catalog(units, small_systems)

    def test_duplicate_external_id_checked_before_unit_rules(
        self, unit_record, small_systems,
    ) -> None:
        units = [
            unit_record("DEG", "Temperature", aliases=["a"]),
            unit_record("DEG", "Temperature", aliases=["b"], multiplier=0.0),
        ]
        with pytest.raises(DuplicateExternalId):
            load_catalog(units, small_systems)

    def test_zero_multiplier_aborts(self, unit_record, system_record) -> None:
        units = [
            unit_record("M", "Length", aliases=["m"]),
            unit_record("NOTHING", "Length", aliases=["none"], multiplier=0.0),
        ]
        systems = [system_record("Default", {"Length": "length:m"})]
        with pytest.raises(InvalidConversion, match="multiplier 0.0"):
            load_catalog(units, systems)

    def test_builder_unchanged_after_failure(self, unit_record) -> None:
        builder = CatalogIndexBuilder(partition="global", default_system="Default")
        units = [
            unit_record("DEG_C", "Temperature", aliases=["x"]),
            unit_record("DEG_F", "Temperature", aliases=["x"]),
        ]
        with pytest.raises(DuplicateAlias):
            load_units(units, builder)
        assert builder.has_unit("temperature:deg_c")
        assert not builder.has_unit("temperature:deg_f")


# ===================================================================
# Malformed input
# ===================================================================


class TestMalformedInput:

    def test_missing_required_field(self, unit_record) -> None:
        record = unit_record("M", "Length")
        del record["aliasNames"]
        with pytest.raises(MalformedCatalog) as exc_info:
            parse_units([record])
        assert exc_info.value.__cause__ is not None

    def test_wrong_type(self, unit_record) -> None:
        record = unit_record("M", "Length")
        record["conversion"] = {"multiplier": "lots", "offset": 0.0}
        with pytest.raises(MalformedCatalog):
            parse_units([record])

    def test_not_json(self) -> None:
        with pytest.raises(MalformedCatalog):
            parse_units("[{not json")

    def test_top_level_object_rejected(self, unit_record) -> None:
        with pytest.raises(MalformedCatalog):
            parse_units({"units": [unit_record("M", "Length")]})

    def test_is_catalog_validation_error(self) -> None:
        with pytest.raises(CatalogValidationError):
            parse_units("42")


# ===================================================================
# System integrity
# ===================================================================


class TestSystemIntegrity:

    def test_duplicate_system(self, small_units, small_systems) -> None:
        small_systems.append(dict(small_systems[1]))
        with pytest.raises(DuplicateSystem, match="Duplicate system Imperial"):
            load_catalog(small_units, small_systems)

    def test_unknown_unit_reference(self, small_units, system_record) -> None:
        systems = [
            system_record("Default", {"Temperature": "temperature:deg_c", "Length": "length:m"}),
            system_record("Imperial", {"Length": "length:yard"}),
        ]
        with pytest.raises(UnknownUnitReference) as exc_info:
            load_catalog(small_units, systems)
        assert exc_info.value.external_id == "length:yard"
        assert exc_info.value.system == "Imperial"

    def test_unknown_quantity_reference(self, small_units, system_record) -> None:
        systems = [
            system_record(
                "Default",
                {"Temperature": "temperature:deg_c", "Length": "length:m", "Mass": "length:m"},
            ),
        ]
        with pytest.raises(UnknownQuantityReference) as exc_info:
            load_catalog(small_units, systems)
        assert exc_info.value.quantity == "Mass"

    def test_missing_default_system(self, small_units, system_record) -> None:
        systems = [system_record("Imperial", {"Temperature": "temperature:deg_f"})]
        with pytest.raises(MissingDefaultSystem) as exc_info:
            load_catalog(small_units, systems)
        assert str(exc_info.value) == "Missing Default system"

    def test_incomplete_default_system(self, small_units, system_record) -> None:
        systems = [system_record("Default", {"Temperature": "temperature:deg_c"})]
        with pytest.raises(IncompleteDefaultSystem) as exc_info:
            load_catalog(small_units, systems)
        assert exc_info.value.missing_quantities == ["Length"]
        assert "Length" in str(exc_info.value)

    def test_last_binding_wins(self, small_units) -> None:
        systems = [
            {
                "name": "Default",
                "quantities": [
                    {"name": "Temperature", "unitExternalId": "temperature:deg_c"},
                    {"name": "Length", "unitExternalId": "length:m"},
                    {"name": "Temperature", "unitExternalId": "temperature:deg_f"},
                ],
            },
        ]
        catalog = load_catalog(small_units, systems)
        deg_c = catalog.get_unit_by_external_id("temperature:deg_c")
        assert catalog.get_unit_by_system(deg_c, "Default").name == "DEG_F"

    def test_system_without_quantities_is_allowed(self, small_units, small_systems) -> None:
        small_systems.append({"name": "Empty"})
        catalog = load_catalog(small_units, small_systems)
        assert catalog.get_system("Empty").quantities == ()

    def test_custom_default_system_name(self, small_units, system_record) -> None:
        systems = [
            system_record("Base", {"Temperature": "temperature:deg_c", "Length": "length:m"}),
        ]
        catalog = load_catalog(small_units, systems, default_system="Base")
        assert catalog.default_system == "Base"

        with pytest.raises(MissingDefaultSystem, match="Missing Base system"):
            load_catalog(small_units, [], default_system="Base")


# ===================================================================
# Single-document and file entry points
# ===================================================================


class TestLoadCatalogDocument:

    def test_loads_combined_document(self, small_units, small_systems) -> None:
        document = json.dumps({"units": small_units, "unitSystems": small_systems})
        catalog = load_catalog_document(document, partition="acme")
        assert catalog.partition == "acme"
        assert len(catalog.units) == 4

    def test_accepts_dict(self, small_units, small_systems) -> None:
        catalog = load_catalog_document(
            {"units": small_units, "unitSystems": small_systems}, partition="acme",
        )
        assert catalog.has_unit("length:ft")

    @pytest.mark.parametrize("missing", ["units", "unitSystems"])
    def test_missing_key(self, small_units, small_systems, missing: str) -> None:
        document = {"units": small_units, "unitSystems": small_systems}
        del document[missing]
        with pytest.raises(MalformedCatalog, match=missing):
            load_catalog_document(json.dumps(document), partition="acme")

    def test_non_object_document(self, small_units) -> None:
        with pytest.raises(MalformedCatalog, match="must be a JSON object"):
            load_catalog_document(json.dumps(small_units), partition="acme")

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedCatalog):
            load_catalog_document("{", partition="acme")

    def test_invalid_utf8_bytes(self) -> None:
        with pytest.raises(MalformedCatalog) as exc_info:
            load_catalog_document(b'{"units": [], "unitSystems": [\xff]}', partition="acme")
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestLoadCatalogFiles:

    def test_loads_from_disk(self, tmp_path, small_units, small_systems) -> None:
        units_path = tmp_path / "units.json"
        systems_path = tmp_path / "unitSystems.json"
        units_path.write_text(json.dumps(small_units), encoding="utf-8")
        systems_path.write_text(json.dumps(small_systems), encoding="utf-8")

        catalog = load_catalog_files(units_path, str(systems_path), partition="files")
        assert catalog.partition == "files"
        assert catalog.has_unit("temperature:deg_f")

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_catalog_files(tmp_path / "nope.json", tmp_path / "nope2.json")

    def test_bundled_catalog_loads(self, bundled_catalog) -> None:
        assert bundled_catalog.partition == "global"
        assert len(bundled_catalog.units) == 33
        assert {s.name for s in bundled_catalog.systems} == {"Default", "SI", "Imperial"}
