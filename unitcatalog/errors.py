"""Unit catalog exception hierarchy.

Exception Hierarchy:
    UnitCatalogError (base)
    ├── CatalogValidationError            load-time; aborts the partition load
    │   ├── MalformedCatalog
    │   ├── DuplicateExternalId
    │   ├── DuplicateAlias
    │   ├── DuplicateSystem
    │   ├── InvalidExternalId
    │   ├── InvalidSourceReference
    │   ├── InconsistentQudtSource
    │   ├── InvalidConversion
    │   ├── UnknownUnitReference
    │   ├── UnknownQuantityReference
    │   ├── MissingDefaultSystem
    │   └── IncompleteDefaultSystem
    ├── NotFound                          query-time; caller-supplied identifier
    │   ├── UnknownUnit
    │   ├── UnknownQuantity
    │   ├── UnknownAlias
    │   ├── UnknownSystem
    │   └── UnknownPartition
    └── IncompatibleQuantities

Load-time errors indicate a corrupt catalog. Query-time errors are reported
per call and never affect the validity of a loaded catalog.
"""

from __future__ import annotations


class UnitCatalogError(Exception):
    """Base exception for all unit catalog errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ==============================================================================
# Load-time (catalog integrity) errors
# ==============================================================================


class CatalogValidationError(UnitCatalogError, ValueError):
    """The catalog being loaded violates a structural or naming invariant."""


class MalformedCatalog(CatalogValidationError):
    """Input document is not a well-formed units or unit-systems document."""


class DuplicateExternalId(CatalogValidationError):
    def __init__(self, external_id: str) -> None:
        super().__init__(f"Duplicate externalId {external_id}")
        self.external_id = external_id


class DuplicateAlias(CatalogValidationError):
    def __init__(self, alias: str, quantity: str) -> None:
        super().__init__(f"Duplicate alias {alias} for quantity {quantity}")
        self.alias = alias
        self.quantity = quantity


class DuplicateSystem(CatalogValidationError):
    def __init__(self, system: str) -> None:
        super().__init__(f"Duplicate system {system}")
        self.system = system


class InvalidExternalId(CatalogValidationError):
    def __init__(self, external_id: str, name: str, quantity: str) -> None:
        super().__init__(f"Invalid externalId {external_id} for unit {name} ({quantity})")
        self.external_id = external_id
        self.name = name
        self.quantity = quantity


class InvalidSourceReference(CatalogValidationError):
    def __init__(self, source_reference: str | None, name: str, quantity: str) -> None:
        super().__init__(
            f"Invalid sourceReference {source_reference} for unit {name} ({quantity})",
        )
        self.source_reference = source_reference
        self.name = name
        self.quantity = quantity


class InconsistentQudtSource(CatalogValidationError):
    def __init__(self, source: str | None, source_reference: str | None, name: str) -> None:
        super().__init__(
            f"Qudt: Inconsistent source {source} and sourceReference "
            f"{source_reference} for unit {name}",
        )
        self.source = source
        self.source_reference = source_reference
        self.name = name


class InvalidConversion(CatalogValidationError):
    def __init__(self, multiplier: float, offset: float, name: str, quantity: str) -> None:
        super().__init__(
            f"Invalid conversion (multiplier {multiplier}, offset {offset}) "
            f"for unit {name} ({quantity})",
        )
        self.multiplier = multiplier
        self.offset = offset
        self.name = name
        self.quantity = quantity


class UnknownUnitReference(CatalogValidationError):
    def __init__(self, external_id: str, system: str) -> None:
        super().__init__(f"Unknown unit '{external_id}' referenced by system {system}")
        self.external_id = external_id
        self.system = system


class UnknownQuantityReference(CatalogValidationError):
    def __init__(self, quantity: str, system: str) -> None:
        super().__init__(f"Unknown quantity {quantity} referenced by system {system}")
        self.quantity = quantity
        self.system = system


class MissingDefaultSystem(CatalogValidationError):
    def __init__(self, default_system: str) -> None:
        super().__init__(f"Missing {default_system} system")
        self.default_system = default_system


class IncompleteDefaultSystem(CatalogValidationError):
    def __init__(self, default_system: str, missing_quantities: list[str]) -> None:
        super().__init__(
            f"Missing units in {default_system} system for quantities: "
            + ", ".join(missing_quantities),
        )
        self.default_system = default_system
        self.missing_quantities = missing_quantities


# ==============================================================================
# Query-time errors
# ==============================================================================


class NotFound(UnitCatalogError, LookupError):
    """A caller-supplied identifier does not exist in the loaded catalog."""


class UnknownUnit(NotFound):
    def __init__(self, external_id: str) -> None:
        super().__init__(f"Unknown unit '{external_id}'")
        self.external_id = external_id


class UnknownQuantity(NotFound):
    def __init__(self, quantity: str) -> None:
        super().__init__(f"Unknown unit quantity '{quantity}'")
        self.quantity = quantity


class UnknownAlias(NotFound):
    def __init__(self, alias: str, quantity: str) -> None:
        super().__init__(f"Unknown unit alias '{alias}' for quantity '{quantity}'")
        self.alias = alias
        self.quantity = quantity


class UnknownSystem(NotFound):
    def __init__(self, system: str) -> None:
        super().__init__(f"Unknown system {system}")
        self.system = system


class UnknownPartition(NotFound):
    def __init__(self, partition: str) -> None:
        super().__init__(f"Unknown project '{partition}'")
        self.partition = partition


class IncompatibleQuantities(UnitCatalogError, ValueError):
    def __init__(self, quantity_from: str, quantity_to: str) -> None:
        super().__init__(
            "Cannot convert between units of different quantities "
            f"(from '{quantity_from}' to '{quantity_to}')",
        )
        self.quantity_from = quantity_from
        self.quantity_to = quantity_to
