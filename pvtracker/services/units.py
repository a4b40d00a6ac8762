# services/units.py
"""
Length conversions.

Every length is stored in inches; these helpers convert at the edges. All of
them are total: anything that is not a finite number is treated as 0.
"""
import math
from typing import Any, NamedTuple, Optional

INCHES_PER_FOOT = 12
CM_PER_INCH = 2.54
METERS_PER_INCH = 0.0254


class FeetInches(NamedTuple):
    feet: int
    inches: int


def parse_number(value: Any) -> float:
    """Coerce `value` to a finite float, falling back to 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_optional_number(value: Any) -> Optional[float]:
    """Like parse_number, but blank form values (None, "") stay unset."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_number(value)


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; measurements round .5 up
    return int(math.floor(value + 0.5))


def inches_to_cm(inches: Any) -> float:
    return parse_number(inches) * CM_PER_INCH


def cm_to_inches(cm: Any) -> float:
    return parse_number(cm) / CM_PER_INCH


def inches_to_meters(inches: Any) -> float:
    return parse_number(inches) * METERS_PER_INCH


def meters_to_inches(meters: Any) -> float:
    return parse_number(meters) / METERS_PER_INCH


def to_inches(feet: Any = 0, inches: Any = 0) -> float:
    """Feet + inches to total inches, never negative."""
    total = parse_number(feet) * INCHES_PER_FOOT + parse_number(inches)
    return max(0.0, total)


def from_inches(total: Any) -> FeetInches:
    """
    Split an inch total into whole feet and rounded inches.

    Negative input clamps to 0. When the inches round up to 12 they carry
    into the feet, so 143.6 gives (12, 0) rather than (11, 12).
    """
    t = max(0.0, parse_number(total))
    feet = int(math.floor(t / INCHES_PER_FOOT))
    inches = round_half_up(t - feet * INCHES_PER_FOOT)
    if inches == INCHES_PER_FOOT:
        return FeetInches(feet + 1, 0)
    return FeetInches(feet, inches)
