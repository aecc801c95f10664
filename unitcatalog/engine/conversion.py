"""Conversion engine — numeric mapping of values between units.

Three conversion kinds, all through the quantity's base unit:
  convert                    base = (value + offset) * multiplier   (scalar values)
  convert_multiplier         base = value * multiplier              (rates of change, total variation)
  convert_square_multiplier  base = value * multiplier**2           (variance)

Converting a unit to itself returns the input untouched. Every other result
is rounded to a fixed number of significant digits to absorb floating-point
noise in the multipliers (0.9999999999999998 becomes 1.0).

Pure functions with no catalog state.
"""

from __future__ import annotations

import math
import sys
from enum import StrEnum

import numpy as np

from unitcatalog.errors import IncompatibleQuantities
from unitcatalog.models.unit import Unit

SIGNIFICANT_DIGITS = 12

_MAX_POWER = sys.float_info.max_10_exp


class ConversionMode(StrEnum):
    """Which conversion formula to apply."""

    AFFINE = "affine"
    MULTIPLIER = "multiplier"
    SQUARE_MULTIPLIER = "square_multiplier"


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


def round_to_significant_digits(value: float, significant_digits: int = SIGNIFICANT_DIGITS) -> float:
    """Round ``value`` to ``significant_digits`` significant decimal digits.

    Zero and non-finite values are returned unchanged. Halves round up.
    """
    if value == 0.0 or not math.isfinite(value):
        return value
    digits = math.ceil(math.log10(abs(value)))
    power = significant_digits - digits
    if power > _MAX_POWER:
        # 10**power is not representable; sub-normal inputs stay as they are.
        return value
    magnitude = 10.0 ** power
    shifted = math.floor(value * magnitude + 0.5)
    return shifted / magnitude


def _round_array(values: np.ndarray, significant_digits: int) -> np.ndarray:
    result = values.copy()
    mask = np.isfinite(values) & (values != 0.0)
    if not mask.any():
        return result
    v = values[mask]
    power = significant_digits - np.ceil(np.log10(np.abs(v)))
    with np.errstate(over="ignore", invalid="ignore"):
        magnitude = np.power(10.0, power)
        rounded = np.floor(v * magnitude + 0.5) / magnitude
    result[mask] = np.where(np.isfinite(magnitude) & np.isfinite(rounded), rounded, v)
    return result


# ---------------------------------------------------------------------------
# Scalar conversions
# ---------------------------------------------------------------------------


def verify_is_convertible(unit_from: Unit, unit_to: Unit) -> None:
    """Raise IncompatibleQuantities unless both units measure the same quantity."""
    if unit_from.quantity != unit_to.quantity:
        raise IncompatibleQuantities(unit_from.quantity, unit_to.quantity)


def convert(
    unit_from: Unit,
    unit_to: Unit,
    value: float,
    *,
    significant_digits: int = SIGNIFICANT_DIGITS,
) -> float:
    """Affine conversion; handles zero-point shifts such as temperature scales."""
    if unit_from == unit_to:
        return value
    verify_is_convertible(unit_from, unit_to)
    base_value = (value + unit_from.conversion.offset) * unit_from.conversion.multiplier
    target_value = (base_value / unit_to.conversion.multiplier) - unit_to.conversion.offset
    return round_to_significant_digits(target_value, significant_digits)


def convert_multiplier(
    unit_from: Unit,
    unit_to: Unit,
    value: float,
    *,
    significant_digits: int = SIGNIFICANT_DIGITS,
) -> float:
    """Scale-only conversion, for differences and total variation."""
    if unit_from == unit_to:
        return value
    verify_is_convertible(unit_from, unit_to)
    base_value = value * unit_from.conversion.multiplier
    target_value = base_value / unit_to.conversion.multiplier
    return round_to_significant_digits(target_value, significant_digits)


def convert_square_multiplier(
    unit_from: Unit,
    unit_to: Unit,
    value: float,
    *,
    significant_digits: int = SIGNIFICANT_DIGITS,
) -> float:
    """Squared-scale conversion, for variance."""
    if unit_from == unit_to:
        return value
    verify_is_convertible(unit_from, unit_to)
    base_value = value * unit_from.conversion.multiplier * unit_from.conversion.multiplier
    target_value = base_value / unit_to.conversion.multiplier / unit_to.conversion.multiplier
    return round_to_significant_digits(target_value, significant_digits)


_SCALAR_CONVERTERS = {
    ConversionMode.AFFINE: convert,
    ConversionMode.MULTIPLIER: convert_multiplier,
    ConversionMode.SQUARE_MULTIPLIER: convert_square_multiplier,
}


def convert_value(
    unit_from: Unit,
    unit_to: Unit,
    value: float,
    *,
    mode: ConversionMode = ConversionMode.AFFINE,
    significant_digits: int = SIGNIFICANT_DIGITS,
) -> float:
    """Dispatch to the scalar converter for ``mode``."""
    return _SCALAR_CONVERTERS[ConversionMode(mode)](
        unit_from, unit_to, value, significant_digits=significant_digits,
    )


# ---------------------------------------------------------------------------
# Series conversion
# ---------------------------------------------------------------------------


def convert_array(
    unit_from: Unit,
    unit_to: Unit,
    values: np.ndarray | list[float],
    *,
    mode: ConversionMode = ConversionMode.AFFINE,
    significant_digits: int = SIGNIFICANT_DIGITS,
) -> np.ndarray:
    """Vectorised form of the scalar conversions, for datapoint series.

    Same identity, quantity and rounding rules, applied element-wise.

    Returns:
        float64 array with the same shape as ``values``.
    """
    arr = np.asarray(values, dtype=np.float64)
    if unit_from == unit_to:
        return arr.copy()
    verify_is_convertible(unit_from, unit_to)

    src = unit_from.conversion
    dst = unit_to.conversion
    mode = ConversionMode(mode)
    if mode == ConversionMode.AFFINE:
        target = ((arr + src.offset) * src.multiplier) / dst.multiplier - dst.offset
    elif mode == ConversionMode.MULTIPLIER:
        target = (arr * src.multiplier) / dst.multiplier
    else:
        target = (arr * src.multiplier * src.multiplier) / dst.multiplier / dst.multiplier
    return _round_array(target, significant_digits)
