from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from app.errors import ERROR_NO_PROJECTION, WARNING_NEAR_BOUNDARY
from .sweref_catalog import (
    COORDINATE_WARNING_BUFFER_METERS,
    SWEREF99_TM,
    SWEREF99_ZONES,
    TM_EASTING_MAX,
    TM_EASTING_MIN,
    ZONE_EASTING_MAX,
    ZONE_EASTING_MIN,
    Projection,
    nearest_zone_by_meridian,
)


class ProjectionPreference(str, Enum):
    AUTO = "auto"
    TM = "tm"
    ZONE = "zone"


@dataclass
class DetectionResult:
    projection: Optional[Projection]
    confidence: float
    alternatives: List[Projection] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def near_boundary(projection: Projection, easting: float) -> bool:
    """Easting within the warning buffer (inclusive) of the projection's east/west edge."""
    buffer = COORDINATE_WARNING_BUFFER_METERS
    bounds = projection.bounds
    return abs(easting - bounds.e_min) <= buffer or abs(bounds.e_max - easting) <= buffer


def boundary_warnings(projection: Optional[Projection], easting: float) -> List[str]:
    if projection is None:
        return []
    return [WARNING_NEAR_BOUNDARY] if near_boundary(projection, easting) else []


def _usable_longitude(longitude: Optional[float]) -> Optional[float]:
    if longitude is None:
        return None
    lon = float(longitude)
    if not math.isfinite(lon) or lon < -180 or lon > 180:
        return None
    return lon


def find_matching_zones(easting: float, northing: float) -> List[Projection]:
    # Shared envelope: every zone matches or none does; the meridian ranking decides.
    return [z for z in SWEREF99_ZONES if z.bounds.contains(easting, northing)]


def rank_zone_candidates(candidates: List[Projection], longitude: Optional[float]) -> List[Projection]:
    """Order zones by closeness of their central meridian to the map longitude.

    The zone nearest the longitude across the whole table goes first. Without a
    longitude the table order is kept.
    """
    if not candidates or longitude is None:
        return list(candidates)
    target = nearest_zone_by_meridian(longitude)
    return sorted(
        candidates,
        key=lambda z: (z is not target, abs(z.central_meridian - longitude)),
    )


def _result(
    projection: Projection,
    confidence: float,
    alternatives: List[Projection],
    easting: float,
) -> DetectionResult:
    return DetectionResult(
        projection=projection,
        confidence=confidence,
        alternatives=list(alternatives),
        warnings=boundary_warnings(projection, easting),
    )


def detect_projection(
    easting: float,
    northing: float,
    center_longitude: Optional[float] = None,
    preference: ProjectionPreference = ProjectionPreference.AUTO,
) -> DetectionResult:
    """Pick the SWEREF 99 projection a pair most likely belongs to.

    Confidence is a heuristic score, not a probability:
      zone preference hit 1.0, TM preference hit 0.9, single zone 1.0,
      several zones 0.85 with a map longitude (0.7 without), TM by range 0.6.
    """
    preference = ProjectionPreference(preference or ProjectionPreference.AUTO)
    lon = _usable_longitude(center_longitude)

    tm_likely = TM_EASTING_MIN <= easting <= TM_EASTING_MAX
    zone_likely = ZONE_EASTING_MIN <= easting <= ZONE_EASTING_MAX
    zone_candidates = find_matching_zones(easting, northing) if zone_likely else []

    if preference == ProjectionPreference.ZONE and zone_candidates:
        ranked = rank_zone_candidates(zone_candidates, lon)
        return _result(ranked[0], 1.0, ranked[1:], easting)

    if preference == ProjectionPreference.TM and tm_likely:
        return _result(SWEREF99_TM, 0.9, zone_candidates, easting)

    if len(zone_candidates) == 1:
        return _result(zone_candidates[0], 1.0, [], easting)

    if len(zone_candidates) > 1:
        ranked = rank_zone_candidates(zone_candidates, lon)
        confidence = 0.85 if lon is not None else 0.7
        return _result(ranked[0], confidence, ranked[1:], easting)

    if tm_likely:
        return _result(SWEREF99_TM, 0.6, [], easting)

    return DetectionResult(projection=None, confidence=0.0, alternatives=[], warnings=[ERROR_NO_PROJECTION])


__all__ = [
    "ProjectionPreference",
    "DetectionResult",
    "near_boundary",
    "boundary_warnings",
    "find_matching_zones",
    "rank_zone_candidates",
    "detect_projection",
]
