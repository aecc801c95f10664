"""Duplicate-conversion review for catalog maintainers.

Units of one quantity that share an identical Conversion are either
duplicates (to be removed) or intentional equivalents (e.g. K/m and degC/m).
Equivalents are listed in an allow-list of externalIds; everything else
found by ``find_duplicate_conversions`` is reported for review.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from unitcatalog.config.settings import DATA_DIR
from unitcatalog.models.unit import Conversion, Unit

EQUIVALENT_UNITS_PATH = DATA_DIR / "equivalentUnits.json"

Duplicates = dict[str, dict[Conversion, list[Unit]]]


def load_equivalent_units(path: str | Path | None = None) -> frozenset[str]:
    """Read the allow-list of externalIds known to be intentional equivalents."""
    path = Path(path) if path is not None else EQUIVALENT_UNITS_PATH
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        msg = f"{path.name} must be a JSON array of externalIds"
        raise ValueError(msg)
    return frozenset(data)


def filter_equivalent_units(duplicates: Duplicates, equivalent_ids: Iterable[str]) -> Duplicates:
    """Drop groups made up entirely of allow-listed units.

    Quantities with no remaining groups are dropped too.
    """
    allowed = frozenset(equivalent_ids)
    remaining: Duplicates = {}
    for quantity, by_conversion in duplicates.items():
        groups = {
            conversion: members
            for conversion, members in by_conversion.items()
            if not all(unit.external_id in allowed for unit in members)
        }
        if groups:
            remaining[quantity] = groups
    return remaining


def format_duplicate_report(duplicates: Duplicates) -> str:
    """Render a markdown report of duplicate-conversion groups."""
    if not duplicates:
        return "No equivalent units were found in the catalog."

    lines = [
        "## Equivalent units found in the catalog",
        "This check scans the catalog looking for equivalent "
        "(or duplicate) unit entries for each quantity.",
        "Equivalent units are allowed, but duplicate units are not allowed.",
        "Duplicate units should be removed from the catalog.",
        "Equivalent units should be added to equivalentUnits.json.",
    ]
    for quantity, by_conversion in duplicates.items():
        lines.append("")
        lines.append(f"### Quantity: *{quantity}*")
        for conversion, members in by_conversion.items():
            lines.append(
                f"  * Multiplier: `{conversion.multiplier}` Offset: `{conversion.offset}`",
            )
            lines.extend(f"    - `{unit.external_id}`" for unit in members)
    return "\n".join(lines)
