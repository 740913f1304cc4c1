"""Type-as-you-go coordinate search.

CoordinateSearch runs sanitize -> parse -> detect -> validate -> transform for
one input and delivers the outcome through on_success / on_error. Every call
takes a sequence number; a call that has been overtaken by a newer one never
reaches a callback. Nothing in flight is cancelled, stale results are only
discarded.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Set, TypeVar

from app.crs.detector import ProjectionPreference, detect_projection
from app.crs.sweref_catalog import Projection
from app.crs.transform import Point, ProjectionEngine, ProjectionLoadCache, transform
from app.errors import (
    ERROR_GENERIC,
    ERROR_MISSING_MODULES,
    ERROR_NO_MAP_VIEW,
    ERROR_NO_PROJECTION,
    ERROR_OUT_OF_BOUNDS,
    ERROR_PARSE,
    CoordinateSearchError,
    SearchOutdated,
    TransformError,
    error_for_key,
)
from extract.coordinate_parser import InputFormat, parse
from qc.bounds import ValidationResult, validate

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_S = 0.3

T = TypeVar("T")


@dataclass(frozen=True)
class MapContext:
    """What the host map tells us: view center longitude and active spatial reference."""

    center_longitude: Optional[float] = None
    spatial_reference: Optional[int] = None


@dataclass
class CoordinateSearchResult:
    point: Point
    projection: Projection
    easting: float
    northing: float
    validation: ValidationResult
    format: InputFormat
    confidence: float
    alternatives: List[Projection] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


SuccessCallback = Callable[[CoordinateSearchResult], Any]
ErrorCallback = Callable[[str], Any]


class CoordinateSearch:
    def __init__(
        self,
        map_context: Callable[[], Optional[MapContext]],
        engine: Optional[ProjectionEngine],
        loads: Optional[ProjectionLoadCache] = None,
        preference: ProjectionPreference = ProjectionPreference.AUTO,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.map_context = map_context
        self.engine = engine
        self.loads = loads if loads is not None else ProjectionLoadCache()
        self.preference = ProjectionPreference(preference)
        self.on_success = on_success
        self.on_error = on_error
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    def _ensure_current(self, sequence: int) -> None:
        if sequence != self._sequence:
            raise SearchOutdated(sequence)

    async def _run(self, text: str, sequence: int) -> CoordinateSearchResult:
        parsed = parse(text)
        self._ensure_current(sequence)
        if not parsed.success or parsed.easting is None or parsed.northing is None:
            raise error_for_key(parsed.error or ERROR_PARSE)
        easting, northing = parsed.easting, parsed.northing

        context = self.map_context()
        detection = detect_projection(
            easting,
            northing,
            context.center_longitude if context else None,
            self.preference,
        )
        self._ensure_current(sequence)
        if detection.projection is None:
            raise error_for_key(ERROR_NO_PROJECTION, detection.warnings)
        projection = detection.projection

        validation = validate(easting, northing, projection)
        self._ensure_current(sequence)
        if not validation.valid:
            raise error_for_key(validation.errors[0] if validation.errors else ERROR_OUT_OF_BOUNDS)

        if self.engine is None:
            raise TransformError(ERROR_MISSING_MODULES)
        context = self.map_context()
        if context is None:
            raise TransformError(ERROR_NO_MAP_VIEW)

        point = await transform(
            easting,
            northing,
            projection,
            context.spatial_reference,
            engine=self.engine,
            loads=self.loads,
        )
        self._ensure_current(sequence)

        warnings = [parsed.warning] if parsed.warning else []
        warnings += detection.warnings + validation.warnings
        return CoordinateSearchResult(
            point=point,
            projection=projection,
            easting=easting,
            northing=northing,
            validation=validation,
            format=parsed.format or InputFormat.UNKNOWN,
            confidence=detection.confidence,
            alternatives=detection.alternatives,
            warnings=list(dict.fromkeys(warnings)),
        )

    async def search(self, text: str) -> CoordinateSearchResult:
        """Run one search. Raises CoordinateSearchError after on_error, or SearchOutdated."""
        self._sequence += 1
        sequence = self._sequence
        log_extra = {"sequence": sequence, "stage": "search"}

        try:
            result = await self._run(text, sequence)
        except SearchOutdated:
            logger.debug("search.outdated", extra=log_extra)
            raise
        except CoordinateSearchError as exc:
            self._deliver_error(sequence, exc.key)
            raise
        except Exception as exc:
            logger.exception("search.crashed", extra=log_extra)
            self._deliver_error(sequence, ERROR_GENERIC)
            raise CoordinateSearchError(ERROR_GENERIC) from exc

        # no awaits between this check and the callback
        if sequence != self._sequence:
            logger.debug("search.outdated", extra=log_extra)
            raise SearchOutdated(sequence)
        if self.on_success is not None:
            try:
                self.on_success(result)
            except Exception as exc:
                logger.exception("search.callback_failed", extra=log_extra)
                self._deliver_error(sequence, ERROR_GENERIC)
                raise CoordinateSearchError(ERROR_GENERIC) from exc
        return result

    def _deliver_error(self, sequence: int, key: str) -> None:
        if sequence != self._sequence:
            logger.debug("search.outdated error=%s", key, extra={"sequence": sequence, "stage": "search"})
            raise SearchOutdated(sequence)
        if self.on_error is not None:
            self.on_error(key)

    async def submit(self, text: str) -> Optional[CoordinateSearchResult]:
        """search() for fire-and-forget callers: outcomes arrive via callbacks only."""
        try:
            return await self.search(text)
        except (SearchOutdated, CoordinateSearchError):
            return None


class Debouncer(Generic[T]):
    """Delay calls to an async function; a new call replaces one that has not fired yet.

    Once fired, a call runs to completion. The future of a replaced call is
    cancelled.
    """

    def __init__(self, fn: Callable[[str], Awaitable[T]], delay: float = SEARCH_DEBOUNCE_S):
        self.fn = fn
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._waiter: Optional["asyncio.Future[T]"] = None
        self._running: Set["asyncio.Task[T]"] = set()

    def __call__(self, value: str) -> "asyncio.Future[T]":
        loop = asyncio.get_running_loop()
        self.cancel()
        waiter: "asyncio.Future[T]" = loop.create_future()

        def fire() -> None:
            self._handle = None
            self._waiter = None
            task = loop.create_task(self.fn(value))
            self._running.add(task)
            task.add_done_callback(self._running.discard)
            task.add_done_callback(lambda t: _chain(t, waiter))

        self._handle = loop.call_later(self.delay, fire)
        self._waiter = waiter
        return waiter

    def cancel(self) -> None:
        """Drop the pending call, if any. Calls that already fired keep running."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._waiter is not None and not self._waiter.done():
            self._waiter.cancel()
        self._waiter = None

    @property
    def pending(self) -> bool:
        return self._handle is not None


def _chain(task: "asyncio.Task[T]", waiter: "asyncio.Future[T]") -> None:
    if waiter.done():
        return
    if task.cancelled():
        waiter.cancel()
    elif task.exception() is not None:
        waiter.set_exception(task.exception())  # type: ignore[arg-type]
    else:
        waiter.set_result(task.result())


__all__ = [
    "MapContext",
    "CoordinateSearchResult",
    "CoordinateSearch",
    "Debouncer",
    "SEARCH_DEBOUNCE_S",
]
