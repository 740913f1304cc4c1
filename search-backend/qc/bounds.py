from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from app.crs.detector import boundary_warnings
from app.crs.sweref_catalog import GLOBAL_BOUNDS, Projection
from app.errors import ERROR_INVALID_NUMBER, ERROR_OUT_OF_BOUNDS, ERROR_OUT_OF_RANGE


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def is_sweref99_range(easting: float, northing: float) -> bool:
    return GLOBAL_BOUNDS.contains(easting, northing)


def validate(easting: float, northing: float, projection: Optional[Projection] = None) -> ValidationResult:
    """Re-check a pair against the detected projection, or the global SWEREF 99 envelope.

    Micro-QC after detection: the detector only looks at the easting for TM, so
    the northing is first checked here. Near-boundary warnings need a projection.
    """
    if not (math.isfinite(easting) and math.isfinite(northing)):
        return ValidationResult(valid=False, errors=[ERROR_INVALID_NUMBER])

    if projection is not None:
        if not projection.bounds.contains(easting, northing):
            return ValidationResult(valid=False, errors=[ERROR_OUT_OF_BOUNDS])
    elif not is_sweref99_range(easting, northing):
        return ValidationResult(valid=False, errors=[ERROR_OUT_OF_RANGE])

    return ValidationResult(valid=True, warnings=boundary_warnings(projection, easting))


__all__ = ["ValidationResult", "is_sweref99_range", "validate"]
