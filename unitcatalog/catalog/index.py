"""Lookup index over one loaded catalog partition.

``CatalogIndexBuilder`` is the only writer: the loader accumulates units and
systems into it, then ``build()`` publishes an immutable ``CatalogIndex``.
Readers only ever see a fully built index, so lookups need no locking.

Views kept per partition:
  - externalId → Unit
  - quantity → units, in insertion order
  - (quantity, alias) → Unit
  - (system, quantity) → canonical Unit
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from unitcatalog.errors import (
    DuplicateAlias,
    DuplicateSystem,
    NotFound,
    UnknownAlias,
    UnknownQuantity,
    UnknownQuantityReference,
    UnknownSystem,
    UnknownUnit,
    UnknownUnitReference,
)
from unitcatalog.models.unit import Unit, UnitSystem


class CatalogIndexBuilder:
    """Mutable accumulator used while a partition is being loaded."""

    def __init__(self, *, partition: str, default_system: str) -> None:
        self.partition = partition
        self.default_system = default_system
        self._units_by_external_id: dict[str, Unit] = {}
        self._units_by_quantity: dict[str, list[Unit]] = {}
        self._units_by_quantity_and_alias: dict[str, dict[str, Unit]] = {}
        self._systems: dict[str, UnitSystem] = {}
        self._unit_by_system_and_quantity: dict[str, dict[str, Unit]] = {}

    # -- Queries used during load -------------------------------------------

    def has_unit(self, external_id: str) -> bool:
        return external_id in self._units_by_external_id

    def has_system(self, name: str) -> bool:
        return name in self._systems

    @property
    def quantities(self) -> list[str]:
        return list(self._units_by_quantity)

    def bound_quantities(self, system: str) -> set[str]:
        return set(self._unit_by_system_and_quantity.get(system, {}))

    # -- Insertion -----------------------------------------------------------

    def add_unit(self, unit: Unit) -> None:
        """Insert a validated unit into every unit view.

        The caller has already checked that the externalId is new.

        Raises:
            DuplicateAlias: another unit of the same quantity owns an alias.
        """
        aliases = self._units_by_quantity_and_alias.get(unit.quantity, {})
        for alias in unit.unique_alias_names:
            if alias in aliases:
                raise DuplicateAlias(alias, unit.quantity)

        self._units_by_external_id[unit.external_id] = unit
        self._units_by_quantity.setdefault(unit.quantity, []).append(unit)
        quantity_aliases = self._units_by_quantity_and_alias.setdefault(unit.quantity, {})
        for alias in unit.unique_alias_names:
            quantity_aliases[alias] = unit

    def add_system(self, system: UnitSystem) -> None:
        """Resolve and insert a unit system.

        Units must already be loaded. A quantity bound twice keeps the
        last binding.

        Raises:
            DuplicateSystem: system name already present.
            UnknownUnitReference: a binding names an unloaded unit.
            UnknownQuantityReference: a binding names a quantity with no units.
        """
        if system.name in self._systems:
            raise DuplicateSystem(system.name)

        bindings: dict[str, Unit] = {}
        for binding in system.quantities:
            unit = self._units_by_external_id.get(binding.unit_external_id)
            if unit is None:
                raise UnknownUnitReference(binding.unit_external_id, system.name)
            if binding.name not in self._units_by_quantity:
                raise UnknownQuantityReference(binding.name, system.name)
            bindings[binding.name] = unit

        self._systems[system.name] = system
        self._unit_by_system_and_quantity[system.name] = bindings

    # -- Publish -------------------------------------------------------------

    def build(self) -> CatalogIndex:
        """Freeze the accumulated views into a read-only index."""
        return CatalogIndex(
            partition=self.partition,
            default_system=self.default_system,
            units_by_external_id=MappingProxyType(dict(self._units_by_external_id)),
            units_by_quantity=MappingProxyType(
                {q: tuple(units) for q, units in self._units_by_quantity.items()},
            ),
            units_by_quantity_and_alias=MappingProxyType(
                {
                    q: MappingProxyType(dict(aliases))
                    for q, aliases in self._units_by_quantity_and_alias.items()
                },
            ),
            systems=MappingProxyType(dict(self._systems)),
            unit_by_system_and_quantity=MappingProxyType(
                {
                    s: MappingProxyType(dict(bindings))
                    for s, bindings in self._unit_by_system_and_quantity.items()
                },
            ),
        )


class CatalogIndex:
    """Read-only, fully loaded catalog partition."""

    def __init__(
        self,
        *,
        partition: str,
        default_system: str,
        units_by_external_id: Mapping[str, Unit],
        units_by_quantity: Mapping[str, tuple[Unit, ...]],
        units_by_quantity_and_alias: Mapping[str, Mapping[str, Unit]],
        systems: Mapping[str, UnitSystem],
        unit_by_system_and_quantity: Mapping[str, Mapping[str, Unit]],
    ) -> None:
        self._partition = partition
        self._default_system = default_system
        self._units_by_external_id = units_by_external_id
        self._units_by_quantity = units_by_quantity
        self._units_by_quantity_and_alias = units_by_quantity_and_alias
        self._systems = systems
        self._unit_by_system_and_quantity = unit_by_system_and_quantity

    def __repr__(self) -> str:
        return (
            f"CatalogIndex(partition={self._partition!r}, units={len(self._units_by_external_id)}, "
            f"systems={len(self._systems)})"
        )

    @property
    def partition(self) -> str:
        return self._partition

    @property
    def default_system(self) -> str:
        return self._default_system

    @property
    def units(self) -> list[Unit]:
        """All units in load order."""
        return list(self._units_by_external_id.values())

    @property
    def quantities(self) -> list[str]:
        return list(self._units_by_quantity)

    @property
    def systems(self) -> list[UnitSystem]:
        return list(self._systems.values())

    # -- Lookups -------------------------------------------------------------

    def has_unit(self, external_id: str) -> bool:
        return external_id in self._units_by_external_id

    def get_unit_by_external_id(self, external_id: str) -> Unit:
        unit = self._units_by_external_id.get(external_id)
        if unit is None:
            raise UnknownUnit(external_id)
        return unit

    def get_units_by_quantity(self, quantity: str) -> list[Unit]:
        units = self._units_by_quantity.get(quantity)
        if units is None:
            raise UnknownQuantity(quantity)
        return list(units)

    def get_unit_by_quantity_and_alias(self, quantity: str, alias: str) -> Unit:
        aliases = self._units_by_quantity_and_alias.get(quantity)
        if aliases is None:
            raise UnknownQuantity(quantity)
        unit = aliases.get(alias)
        if unit is None:
            raise UnknownAlias(alias, quantity)
        return unit

    def get_system(self, name: str) -> UnitSystem:
        system = self._systems.get(name)
        if system is None:
            raise UnknownSystem(name)
        return system

    def get_unit_by_system(self, source_unit: Unit, target_system: str) -> Unit:
        """Canonical unit for ``source_unit``'s quantity under ``target_system``.

        Falls back to the default system when the target system has no
        binding for the quantity.

        Raises:
            UnknownSystem: ``target_system`` is not loaded.
            NotFound: neither system binds the quantity.
        """
        bindings = self._unit_by_system_and_quantity.get(target_system)
        if bindings is None:
            raise UnknownSystem(target_system)
        unit = bindings.get(source_unit.quantity)
        if unit is None:
            unit = self._unit_by_system_and_quantity.get(self._default_system, {}).get(
                source_unit.quantity,
            )
        if unit is None:
            raise NotFound(f"Cannot convert from {source_unit.quantity}")
        return unit
