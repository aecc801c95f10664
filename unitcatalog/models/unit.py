"""Immutable catalog entities — Conversion, Unit, SystemQuantity, UnitSystem.

All entities are frozen: they are built once from a serialized record at
catalog-load time and shared by every reader of the loaded partition.
Frozen pydantic models compare and hash by value, so two units with equal
``Conversion`` values encode the same physical scale.
"""

from pydantic import Field

from unitcatalog.models.common import UnitCatalogBase


class Conversion(UnitCatalogBase, frozen=True):
    """Affine map from a unit's value to the base unit of its quantity.

    baseUnitValue = (unitValue + offset) * multiplier
    """

    multiplier: float
    offset: float


class Unit(UnitCatalogBase, frozen=True):
    """A unit of measure belonging to exactly one quantity."""

    external_id: str = Field(..., description="'{quantity}:{name}' in sanitized snake_case.")
    name: str
    long_name: str
    symbol: str | None = None
    alias_names: tuple[str, ...] = Field(
        ...,
        description="Alternative spellings, unique per quantity across the catalog.",
    )
    quantity: str
    conversion: Conversion
    source: str | None = None
    source_reference: str | None = None

    @property
    def unique_alias_names(self) -> tuple[str, ...]:
        """Aliases de-duplicated by value, first occurrence wins.

        The same alias can appear twice when a record lists both an escaped
        and a literal encoding of it (e.g. "\\u00b0C" and "°C").
        """
        return tuple(dict.fromkeys(self.alias_names))

    def to_payload(self) -> dict[str, object]:
        """Serialize back to the wire (camelCase) representation."""
        return self.model_dump(by_alias=True, mode="json")


class SystemQuantity(UnitCatalogBase, frozen=True):
    """Binding of one quantity to its canonical unit inside a unit system."""

    name: str = Field(..., description="Quantity name.")
    unit_external_id: str


class UnitSystem(UnitCatalogBase, frozen=True):
    """A named convention assigning one canonical unit per quantity."""

    name: str
    quantities: tuple[SystemQuantity, ...] = ()

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")
