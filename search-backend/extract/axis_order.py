from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.errors import WARNING_AMBIGUOUS_ORDER

MIN_EASTING = 30_000
MAX_EASTING = 800_000
MIN_NORTHING = 5_900_000
MAX_NORTHING = 7_800_000


@dataclass(frozen=True)
class AxisOrder:
    easting: float
    northing: float
    warning: Optional[str] = None


def is_easting(value: float) -> bool:
    return MIN_EASTING <= value <= MAX_EASTING


def is_northing(value: float) -> bool:
    return MIN_NORTHING <= value <= MAX_NORTHING


def is_likely_geographic(first: float, second: float) -> bool:
    """True when the pair reads like latitude/longitude degrees."""
    abs_first, abs_second = abs(first), abs(second)
    return (abs_first <= 90 and abs_second <= 180) or (abs_first <= 90 and abs_second <= 90)


def resolve_axis_order(first: float, second: float) -> Optional[AxisOrder]:
    """Decide which of two numbers is the easting.

    Returns None for geographic-looking pairs and for pairs whose order cannot
    be determined; the caller tells the two apart with is_likely_geographic.
    """
    if is_likely_geographic(first, second):
        return None

    first_e, first_n = is_easting(first), is_northing(first)
    second_e, second_n = is_easting(second), is_northing(second)

    if first_e and not first_n and second_n and not second_e:
        return AxisOrder(first, second)
    if first_n and not first_e and second_e and not second_n:
        return AxisOrder(second, first)

    # one value in range, the other in neither range
    if first_e and not second_e and not second_n:
        return AxisOrder(first, second)
    if second_e and not first_e and not first_n:
        return AxisOrder(second, first)

    # Ambiguous: easting-first is the default. The two branches check different
    # values before warning; keep them asymmetric.
    if first_e and second_n:
        warning = WARNING_AMBIGUOUS_ORDER if second_e else None
        return AxisOrder(first, second, warning)
    if first_n and second_e:
        warning = WARNING_AMBIGUOUS_ORDER if first_e else None
        return AxisOrder(second, first, warning)

    return None


__all__ = [
    "AxisOrder",
    "MIN_EASTING",
    "MAX_EASTING",
    "MIN_NORTHING",
    "MAX_NORTHING",
    "is_easting",
    "is_northing",
    "is_likely_geographic",
    "resolve_axis_order",
]
