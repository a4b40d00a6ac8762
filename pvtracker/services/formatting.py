# services/formatting.py
"""
Display strings for stored inch values.

A zero (or missing, or non-numeric) value means "not set" and renders as an
em-dash, never as a zero-length measurement.
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional

from pvtracker.models.settings import Athlete
from .units import from_inches, inches_to_cm, inches_to_meters, parse_number, round_half_up

UNSET = "—"

_TRAILING_ZEROS = re.compile(r"\.?0+$")


def _feet_inches(value: float) -> str:
    feet, inches = from_inches(value)
    return f"{feet}'{inches}\""


def _centimeters(value: float) -> str:
    return f"{round_half_up(inches_to_cm(value))} cm"


def fmt_standards(inches: Any, units: str) -> str:
    val = parse_number(inches)
    if not val:
        return UNSET
    if units == "metric":
        return _centimeters(val)
    return _feet_inches(val)


def fmt_takeoff(inches: Any, units: str) -> str:
    val = parse_number(inches)
    if not val:
        return UNSET
    if units == "metric":
        return _centimeters(val)
    return _feet_inches(val)


def fmt_bar(inches: Any, units: str) -> str:
    """Bar height: feet/inches, or meters with at most two decimals (4.50 -> 4.5 m)."""
    val = parse_number(inches)
    if not val:
        return UNSET
    if units == "metric":
        meters = _TRAILING_ZEROS.sub("", f"{inches_to_meters(val):.2f}")
        return f"{meters} m"
    return _feet_inches(val)


def fmt_feet_in(inches_total: Any) -> str:
    """Approach distance; always feet/inches whatever the unit setting."""
    feet, inches = from_inches(inches_total)
    if not feet and not inches:
        return UNSET
    return f"{feet}'{inches}\""


def fmt_steps(steps: Any) -> str:
    if steps is None or steps == "":
        return UNSET
    val = parse_number(steps)
    return str(int(val)) if val.is_integer() else str(val)


def fmt_average_steps(avg: Any) -> str:
    val = parse_number(avg)
    return f"{val:.1f}" if val else UNSET


def full_name(athlete: Optional[Athlete]) -> str:
    if athlete is None:
        return ""
    first = (athlete.first_name or "").strip()
    last = (athlete.last_name or "").strip()
    return " ".join(part for part in (first, last) if part)


def level_label(level: Optional[str]) -> str:
    return "College" if level == "college" else "High School"


def to_local(when: datetime) -> datetime:
    """Stored (UTC) timestamp in the server's local timezone; naive means UTC."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone()


def fmt_session_date(when: datetime) -> str:
    # local calendar date, M/D/YYYY, no zero padding
    when = to_local(when)
    return f"{when.month}/{when.day}/{when.year}"
