"""Error and warning keys plus the exception taxonomy of the coordinate search.

All user-facing outcomes are opaque string keys; translating them into display
text is the caller's job.
"""
from __future__ import annotations

from typing import Iterable, Tuple

# Input
ERROR_EMPTY = "coordinateErrorEmpty"
ERROR_TOO_LONG = "coordinateErrorTooLong"
ERROR_PARSE = "coordinateErrorParse"
ERROR_NOT_SWEREF = "coordinateErrorNotSweref"
ERROR_INVALID_NUMBER = "coordinateErrorInvalidNumber"

# Range
ERROR_OUT_OF_RANGE = "coordinateErrorOutOfRange"
ERROR_OUT_OF_BOUNDS = "coordinateErrorOutOfBounds"

# Detection
ERROR_NO_PROJECTION = "coordinateErrorNoProjection"

# Transform
ERROR_PROJECTION_TIMEOUT = "coordinateErrorProjectionTimeout"
ERROR_PROJECTION_LOAD = "coordinateErrorProjectionLoad"
ERROR_NO_SPATIAL_REFERENCE = "coordinateErrorNoSpatialReference"
ERROR_INVALID_PROJECTION = "coordinateErrorInvalidProjection"
ERROR_INVALID_COORDINATES = "coordinateErrorInvalidCoordinates"
ERROR_TRANSFORM = "coordinateErrorTransform"
ERROR_MISSING_MODULES = "coordinateErrorMissingModules"
ERROR_NO_MAP_VIEW = "coordinateErrorNoMapView"

ERROR_GENERIC = "coordinateErrorGeneric"

WARNING_NEAR_BOUNDARY = "coordinateWarningNearBoundary"
WARNING_AMBIGUOUS_ORDER = "coordinateWarningAmbiguousOrder"

_RANGE_KEYS = {ERROR_OUT_OF_RANGE, ERROR_OUT_OF_BOUNDS}


class CoordinateSearchError(Exception):
    """A failed coordinate search, carrying the error key shown to the user."""

    def __init__(self, key: str, warnings: Iterable[str] = ()):
        super().__init__(key)
        self.key = key
        self.warnings: Tuple[str, ...] = tuple(warnings)


class InputError(CoordinateSearchError):
    """Empty, too long, unparseable or geographic-looking input."""


class CoordinateRangeError(CoordinateSearchError):
    """Outside the global SWEREF99 envelope or the detected projection bounds."""


class ProjectionNotFoundError(CoordinateSearchError):
    """No SWEREF99 definition matched the pair."""


class TransformError(CoordinateSearchError):
    """Projection engine load timeout/failure or an unusable transform result."""


class SearchOutdated(Exception):
    """Internal signal: a newer search superseded this one. Never shown to users."""

    def __init__(self, sequence: int):
        super().__init__(f"search {sequence} is outdated")
        self.sequence = sequence


def error_for_key(key: str, warnings: Iterable[str] = ()) -> CoordinateSearchError:
    """Wrap a synchronous-stage error key in the matching exception type."""
    if key in _RANGE_KEYS:
        return CoordinateRangeError(key, warnings)
    if key == ERROR_NO_PROJECTION:
        return ProjectionNotFoundError(key, warnings)
    return InputError(key, warnings)


__all__ = [
    "CoordinateSearchError",
    "InputError",
    "CoordinateRangeError",
    "ProjectionNotFoundError",
    "TransformError",
    "SearchOutdated",
    "error_for_key",
]
