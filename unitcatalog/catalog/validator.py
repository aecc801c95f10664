"""Unit naming and provenance rules, plus duplicate-conversion detection.

Pure functions over Unit values; nothing here touches an index. The loader
calls ``validate_unit`` for every record before indexing it.

Rules enforced by ``validate_unit``:
  1. externalId is ``{sanitized quantity}:{sanitized name}``.
  2. A qudt.org unit references ``https://qudt.org/vocab/unit/{name}``;
     any other reference must be an absolute http(s) URL.
  3. source is "qudt.org" if and only if the reference mentions qudt.
  4. The conversion is finite and its multiplier is non-zero.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from unitcatalog.errors import (
    InconsistentQudtSource,
    InvalidConversion,
    InvalidExternalId,
    InvalidSourceReference,
)
from unitcatalog.models.unit import Conversion, Unit

QUDT_SOURCE = "qudt.org"
QUDT_UNIT_VOCABULARY = "https://qudt.org/vocab/unit/"

_IDENTIFIER_RE = re.compile(r"[^a-z0-9_-]")
_HTTP_URL = TypeAdapter(AnyHttpUrl)


def sanitize_identifier(identifier: str) -> str:
    """Lowercase and replace everything except [a-z0-9_-] with '_'."""
    return _IDENTIFIER_RE.sub("_", identifier.lower())


def expected_external_id(unit: Unit) -> str:
    return f"{sanitize_identifier(unit.quantity)}:{sanitize_identifier(unit.name)}"


def expected_source_reference(unit: Unit) -> str | None:
    """Return the reference the unit is expected to carry.

    Raises:
        InvalidSourceReference: a non-qudt reference is not an absolute http(s) URL.
    """
    if unit.source == QUDT_SOURCE:
        return f"{QUDT_UNIT_VOCABULARY}{unit.name}"

    if unit.source_reference is not None:
        try:
            _HTTP_URL.validate_python(unit.source_reference)
        except ValidationError as exc:
            raise InvalidSourceReference(
                unit.source_reference, unit.name, unit.quantity,
            ) from exc
    return unit.source_reference


def validate_unit(unit: Unit) -> None:
    """Check the naming and provenance rules for a single unit.

    Raises:
        InvalidExternalId: externalId does not match quantity and name.
        InvalidSourceReference: reference has the wrong form.
        InconsistentQudtSource: source and reference disagree about qudt.
        InvalidConversion: multiplier is zero, or either term is not finite.
    """
    if unit.external_id != expected_external_id(unit):
        raise InvalidExternalId(unit.external_id, unit.name, unit.quantity)

    # A missing reference is only caught by the consistency rule below.
    expected_reference = expected_source_reference(unit)
    if unit.source_reference is not None and unit.source_reference != expected_reference:
        raise InvalidSourceReference(unit.source_reference, unit.name, unit.quantity)

    source_is_qudt = unit.source == QUDT_SOURCE
    reference_mentions_qudt = unit.source_reference is not None and "qudt" in unit.source_reference
    if source_is_qudt != reference_mentions_qudt:
        raise InconsistentQudtSource(unit.source, unit.source_reference, unit.name)

    conversion = unit.conversion
    if (
        conversion.multiplier == 0.0
        or not math.isfinite(conversion.multiplier)
        or not math.isfinite(conversion.offset)
    ):
        raise InvalidConversion(
            conversion.multiplier, conversion.offset, unit.name, unit.quantity,
        )


def find_duplicate_conversions(
    units: Iterable[Unit],
) -> dict[str, dict[Conversion, list[Unit]]]:
    """Group units by quantity, then by identical Conversion.

    Only groups with two or more members are returned; quantities without
    such a group are omitted. This does not fail: the caller decides which
    groups are intentional equivalents (see ``catalog.review``).
    """
    grouped: dict[str, dict[Conversion, list[Unit]]] = {}
    for unit in units:
        grouped.setdefault(unit.quantity, {}).setdefault(unit.conversion, []).append(unit)

    duplicates: dict[str, dict[Conversion, list[Unit]]] = {}
    for quantity, by_conversion in grouped.items():
        groups = {conv: members for conv, members in by_conversion.items() if len(members) > 1}
        if groups:
            duplicates[quantity] = groups
    return duplicates
