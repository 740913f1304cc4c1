"""Asynchronous SWEREF 99 -> map spatial reference transform.

The projection engine is loaded lazily through a ProjectionLoadCache: one
shared load task per engine, raced against a timeout and evicted on failure so
a later call can retry. Loading is the only part that suspends; projecting a
point is synchronous.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Protocol, Set, Tuple

from pyproj import CRS, Transformer

from app.errors import (
    ERROR_INVALID_COORDINATES,
    ERROR_INVALID_PROJECTION,
    ERROR_NO_SPATIAL_REFERENCE,
    ERROR_PROJECTION_LOAD,
    ERROR_PROJECTION_TIMEOUT,
    ERROR_TRANSFORM,
    TransformError,
)
from .sweref_catalog import SWEREF99_PROJECTIONS, Projection

logger = logging.getLogger(__name__)

PROJECTION_LOAD_TIMEOUT_S = 5.0
LOAD_RETRY_DELAY_S = 0.01


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    spatial_reference: Optional[int] = None


class ProjectionEngine(Protocol):
    async def load(self) -> None:
        ...

    def project(self, point: Point, target: int) -> Any:
        ...


class PyprojEngine:
    """Projection engine backed by pyproj (PROJ)."""

    def __init__(self) -> None:
        self._loaded = False
        self._transformers: Dict[Tuple[int, int], Transformer] = {}

    @property
    def loaded(self) -> bool:
        return self._loaded

    @staticmethod
    def _warm_up() -> None:
        # Opens the PROJ database; slow on first use
        for projection in SWEREF99_PROJECTIONS:
            CRS.from_epsg(projection.epsg)

    async def load(self) -> None:
        await asyncio.to_thread(self._warm_up)
        self._loaded = True

    def _transformer(self, source: int, target: int) -> Transformer:
        key = (source, target)
        transformer = self._transformers.get(key)
        if transformer is None:
            transformer = Transformer.from_crs(f"EPSG:{source}", f"EPSG:{target}", always_xy=True)
            self._transformers[key] = transformer
        return transformer

    def project(self, point: Point, target: int) -> Point:
        if not self._loaded:
            raise RuntimeError("projection engine used before load()")
        if point.spatial_reference is None:
            raise ValueError("source point has no spatial reference")
        x, y = self._transformer(point.spatial_reference, target).transform(point.x, point.y)
        return Point(x=float(x), y=float(y), spatial_reference=target)


class ProjectionLoadCache:
    """Memoized engine loads keyed by engine identity.

    Owned by whoever composes the search (app state, a test), never global.
    """

    def __init__(self, timeout: float = PROJECTION_LOAD_TIMEOUT_S, retry_delay: float = LOAD_RETRY_DELAY_S):
        self.timeout = timeout
        self.retry_delay = retry_delay
        self._loads: Dict[Any, "asyncio.Task[None]"] = {}
        self._in_progress: Set[Any] = set()

    def is_loaded(self, engine: ProjectionEngine) -> bool:
        task = self._loads.get(engine)
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    async def _load(self, engine: ProjectionEngine, key: Any) -> None:
        logger.info("projection.load.start", extra={"stage": "transform"})
        try:
            await asyncio.wait_for(engine.load(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("projection.load.timeout after %.1fs", self.timeout, extra={"stage": "transform"})
            raise TransformError(ERROR_PROJECTION_TIMEOUT) from exc
        except Exception as exc:
            logger.warning("projection.load.failed: %s", exc, extra={"stage": "transform"})
            raise TransformError(ERROR_PROJECTION_LOAD) from exc
        finally:
            self._in_progress.discard(key)

    async def ensure_loaded(self, engine: ProjectionEngine) -> None:
        key = engine
        task = self._loads.get(key)
        if task is None and key in self._in_progress:
            # marked as starting but not registered yet
            await asyncio.sleep(self.retry_delay)
            task = self._loads.get(key)
        if task is None:
            self._in_progress.add(key)
            task = asyncio.ensure_future(self._load(engine, key))
            self._loads[key] = task

        try:
            # shield: a caller going away must not abort the shared load
            await asyncio.shield(task)
        except TransformError:
            if self._loads.get(key) is task:
                del self._loads[key]
            raise

    def clear(self) -> None:
        self._loads.clear()
        self._in_progress.clear()


def create_sweref99_point(easting: float, northing: float, projection: Optional[Projection]) -> Point:
    if projection is None or not isinstance(projection.epsg, int) or projection.epsg <= 0:
        raise TransformError(ERROR_INVALID_PROJECTION)
    if not (math.isfinite(easting) and math.isfinite(northing)):
        raise TransformError(ERROR_INVALID_COORDINATES)
    return Point(x=float(easting), y=float(northing), spatial_reference=projection.epsg)


def _as_point(geometry: Any) -> Optional[Point]:
    if isinstance(geometry, Point):
        return geometry
    x = getattr(geometry, "x", None)
    y = getattr(geometry, "y", None)
    if isinstance(x, (int, float)) and isinstance(y, (int, float)):
        return Point(x=float(x), y=float(y), spatial_reference=getattr(geometry, "spatial_reference", None))
    return None


async def transform(
    easting: float,
    northing: float,
    projection: Projection,
    target_spatial_reference: Optional[int],
    *,
    engine: ProjectionEngine,
    loads: ProjectionLoadCache,
) -> Point:
    """Project a SWEREF 99 pair into the map's spatial reference.

    Returns the source point untouched (no engine load) when the references
    already match. Failures raise TransformError carrying an error key.
    """
    if target_spatial_reference is None:
        raise TransformError(ERROR_NO_SPATIAL_REFERENCE)

    source = create_sweref99_point(easting, northing, projection)
    if source.spatial_reference == target_spatial_reference:
        return source

    await loads.ensure_loaded(engine)

    try:
        projected = engine.project(source, target_spatial_reference)
    except Exception as exc:
        logger.warning("projection.project.failed: %s", exc, extra={"stage": "transform", "epsg": projection.epsg})
        raise TransformError(ERROR_TRANSFORM) from exc

    point = _as_point(projected)
    if point is None or not (math.isfinite(point.x) and math.isfinite(point.y)):
        raise TransformError(ERROR_TRANSFORM)
    if point.spatial_reference is None:
        point = replace(point, spatial_reference=target_spatial_reference)
    return point


__all__ = [
    "Point",
    "ProjectionEngine",
    "PyprojEngine",
    "ProjectionLoadCache",
    "PROJECTION_LOAD_TIMEOUT_S",
    "create_sweref99_point",
    "transform",
]
