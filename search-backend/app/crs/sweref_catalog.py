from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

# SWEREF 99 definitions: one national TM plus twelve local zones.
# All zones share one bounds envelope and differ only by central meridian.

COORDINATE_WARNING_BUFFER_METERS = 5_000

TM_EASTING_MIN = 300_000
TM_EASTING_MAX = 700_000
ZONE_EASTING_MIN = 50_000
ZONE_EASTING_MAX = 250_000

GLOBAL_EASTING_MIN = 30_000
GLOBAL_EASTING_MAX = 800_000
GLOBAL_NORTHING_MIN = 5_900_000
GLOBAL_NORTHING_MAX = 7_800_000


@dataclass(frozen=True)
class Bounds:
    e_min: float
    e_max: float
    n_min: float
    n_max: float

    def contains(self, easting: float, northing: float) -> bool:
        return self.e_min <= easting <= self.e_max and self.n_min <= northing <= self.n_max


@dataclass(frozen=True)
class Projection:
    id: str
    epsg: int
    name: str
    kind: str  # 'tm' or 'zone'
    central_meridian: float
    scale_factor: float
    false_easting: float
    false_northing: float
    bounds: Bounds
    zone_id: Optional[str] = None

    @property
    def code(self) -> str:
        return f"EPSG:{self.epsg}"


GLOBAL_BOUNDS = Bounds(GLOBAL_EASTING_MIN, GLOBAL_EASTING_MAX, GLOBAL_NORTHING_MIN, GLOBAL_NORTHING_MAX)
ZONE_BOUNDS = Bounds(ZONE_EASTING_MIN, ZONE_EASTING_MAX, 6_100_000, 7_700_000)

SWEREF99_TM = Projection(
    id="sweref99-tm",
    epsg=3006,
    name="SWEREF 99 TM",
    kind="tm",
    central_meridian=15.0,
    scale_factor=0.9996,
    false_easting=500_000,
    false_northing=0,
    bounds=Bounds(TM_EASTING_MIN, TM_EASTING_MAX, 6_100_000, 7_700_000),
)

# (zone id, epsg, central meridian); table order is significant for unranked results
ZONE_SPECS: List[Tuple[str, int, float]] = [
    ("12 00", 3007, 12.0),
    ("13 30", 3008, 13.5),
    ("15 00", 3009, 15.0),
    ("16 30", 3010, 16.5),
    ("18 00", 3011, 18.0),
    ("14 15", 3012, 14.25),
    ("15 45", 3013, 15.75),
    ("17 15", 3014, 17.25),
    ("18 45", 3015, 18.75),
    ("20 15", 3016, 20.25),
    ("21 45", 3017, 21.75),
    ("23 15", 3018, 23.25),
]


def _zone_projection(zone_id: str, epsg: int, central_meridian: float) -> Projection:
    return Projection(
        id=f"sweref99-{zone_id.replace(' ', '')}",
        epsg=epsg,
        name=f"SWEREF 99 {zone_id}",
        kind="zone",
        central_meridian=central_meridian,
        scale_factor=1.0,
        false_easting=150_000,
        false_northing=0,
        bounds=ZONE_BOUNDS,
        zone_id=zone_id,
    )


SWEREF99_ZONES: List[Projection] = [_zone_projection(*entry) for entry in ZONE_SPECS]
SWEREF99_PROJECTIONS: List[Projection] = [SWEREF99_TM, *SWEREF99_ZONES]

EPSG_TO_PROJECTION: Dict[int, Projection] = {p.epsg: p for p in SWEREF99_PROJECTIONS}
PROJECTIONS_BY_ID: Dict[str, Projection] = {p.id: p for p in SWEREF99_PROJECTIONS}
CM_TO_ZONE: Dict[float, Projection] = {round(z.central_meridian, 2): z for z in SWEREF99_ZONES}


def projection_for_epsg(epsg: int) -> Optional[Projection]:
    return EPSG_TO_PROJECTION.get(int(epsg))


def nearest_zone_by_meridian(longitude: float) -> Projection:
    """Zone whose central meridian is closest to the longitude; first in table order on ties."""
    nearest = SWEREF99_ZONES[0]
    min_diff = float("inf")
    for zone in SWEREF99_ZONES:
        diff = abs(zone.central_meridian - longitude)
        if diff < min_diff:
            nearest, min_diff = zone, diff
    return nearest


__all__ = [
    "Bounds",
    "Projection",
    "SWEREF99_TM",
    "SWEREF99_ZONES",
    "SWEREF99_PROJECTIONS",
    "EPSG_TO_PROJECTION",
    "PROJECTIONS_BY_ID",
    "CM_TO_ZONE",
    "GLOBAL_BOUNDS",
    "COORDINATE_WARNING_BUFFER_METERS",
    "projection_for_epsg",
    "nearest_zone_by_meridian",
]
