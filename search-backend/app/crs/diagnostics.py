from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .sweref_catalog import Projection


def pack_projection(projection: Projection) -> Dict[str, Any]:
    d = asdict(projection)
    d["code"] = projection.code
    return d


def pack_point(point: Any) -> Optional[Dict[str, Any]]:
    if point is None:
        return None
    return {"x": point.x, "y": point.y, "spatial_reference": point.spatial_reference}


def summarize_result(result: Any) -> Dict[str, Any]:
    """Flatten a CoordinateSearchResult into a JSON-safe summary for storage or transport."""
    alternatives: List[Projection] = list(result.alternatives or [])
    return {
        "projection_id": result.projection.id,
        "epsg": result.projection.epsg,
        "easting": result.easting,
        "northing": result.northing,
        "warnings": list(result.warnings),
        "confidence": result.confidence,
        "format": getattr(result.format, "value", result.format),
        "alternative_projection_ids": [p.id for p in alternatives],
        "map_point": pack_point(result.point),
    }


__all__ = ["pack_projection", "pack_point", "summarize_result"]
