import asyncio
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from fastapi.requests import HTTPConnection

from app.cache import _NoopCache
from app.crs.detector import ProjectionPreference, detect_projection
from app.crs.diagnostics import pack_point, pack_projection, summarize_result
from app.crs.heuristics import classify_input
from app.crs.sweref_catalog import EPSG_TO_PROJECTION, SWEREF99_PROJECTIONS
from app.crs.transform import ProjectionEngine, ProjectionLoadCache, transform
from app.errors import ERROR_MISSING_MODULES, CoordinateSearchError, TransformError
from app.schemas import (
    ClassifyResponse,
    DetectRequest,
    DetectResponse,
    ErrorResponse,
    ParseResponse,
    PointModel,
    ProjectionListResponse,
    SanitizeResponse,
    SearchRequest,
    SearchResponse,
    TextRequest,
    TransformRequest,
    TransformResponse,
    ValidateRequest,
    ValidateResponse,
)
from app.search import CoordinateSearch, CoordinateSearchResult, Debouncer, MapContext
from app.settings import SETTINGS
from extract.coordinate_parser import parse
from extract.sanitize import is_suggestable_term, sanitize, sanitize_search_term
from qc.bounds import validate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coordinates", tags=["coordinates"])


# Composition lives on app.state (see app.main); HTTPConnection covers both HTTP and websocket.
def get_engine(conn: HTTPConnection) -> Optional[ProjectionEngine]:
    return getattr(conn.app.state, "projection_engine", None)


def get_loads(conn: HTTPConnection) -> ProjectionLoadCache:
    loads = getattr(conn.app.state, "projection_loads", None)
    if loads is None:
        loads = ProjectionLoadCache(SETTINGS.projection_load_timeout_s)
        conn.app.state.projection_loads = loads
    return loads


def get_cache(conn: HTTPConnection):
    cache = getattr(conn.app.state, "cache", None)
    return cache if cache is not None else _NoopCache()


def _error_response(exc: CoordinateSearchError) -> JSONResponse:
    body = ErrorResponse(error=exc.key, warnings=list(exc.warnings))
    return JSONResponse(status_code=422, content=body.model_dump())


def _preference(value: Optional[str]) -> ProjectionPreference:
    return ProjectionPreference(value or SETTINGS.default_preference)


@router.get("/projections", response_model=ProjectionListResponse)
async def list_projections() -> ProjectionListResponse:
    """The TM projection followed by the 12 local zones, in table order."""
    return ProjectionListResponse(projections=[pack_projection(p) for p in SWEREF99_PROJECTIONS])


@router.post("/sanitize", response_model=SanitizeResponse)
async def sanitize_text(req: TextRequest) -> SanitizeResponse:
    term = sanitize_search_term(req.text)
    return SanitizeResponse(
        coordinate_text=sanitize(req.text),
        search_term=term,
        suggestable=is_suggestable_term(term),
    )


@router.post("/classify", response_model=ClassifyResponse)
async def classify_text(req: TextRequest) -> ClassifyResponse:
    return ClassifyResponse(**asdict(classify_input(req.text)))


@router.post("/parse", response_model=ParseResponse)
async def parse_text(req: TextRequest) -> ParseResponse:
    """Parse free text into an (easting, northing) pair.

    Always 200: a failed parse is a normal outcome and carries its error key.
    """
    result = parse(req.text)
    return ParseResponse(
        success=result.success,
        easting=result.easting,
        northing=result.northing,
        format=result.format.value if result.format is not None else None,
        sanitized=result.sanitized,
        warning=result.warning,
        error=result.error,
    )


@router.post("/detect", response_model=DetectResponse)
async def detect(req: DetectRequest) -> DetectResponse:
    result = detect_projection(req.easting, req.northing, req.center_longitude, ProjectionPreference(req.preference))
    return DetectResponse(
        projection=pack_projection(result.projection) if result.projection else None,
        confidence=result.confidence,
        alternatives=[pack_projection(p) for p in result.alternatives],
        warnings=result.warnings,
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate_pair(req: ValidateRequest) -> ValidateResponse:
    projection = EPSG_TO_PROJECTION.get(req.epsg) if req.epsg is not None else None
    result = validate(req.easting, req.northing, projection)
    return ValidateResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.post(
    "/transform",
    response_model=TransformResponse,
    responses={422: {"model": ErrorResponse}},
)
async def transform_pair(
    req: TransformRequest,
    engine: Optional[ProjectionEngine] = Depends(get_engine),
    loads: ProjectionLoadCache = Depends(get_loads),
    cache=Depends(get_cache),
):
    projection = EPSG_TO_PROJECTION[req.epsg]
    target = req.target_wkid or SETTINGS.default_target_wkid

    cached = await cache.get_point(req.epsg, target, req.easting, req.northing)
    if cached:
        return TransformResponse(point=PointModel(**cached), cached=True)

    if engine is None:
        return _error_response(TransformError(ERROR_MISSING_MODULES))
    try:
        point = await transform(req.easting, req.northing, projection, target, engine=engine, loads=loads)
    except TransformError as exc:
        logger.info("transform.failed error=%s", exc.key, extra={"stage": "transform", "epsg": req.epsg})
        return _error_response(exc)

    packed = pack_point(point)
    await cache.set_point(req.epsg, target, req.easting, req.northing, packed)
    return TransformResponse(point=PointModel(**packed), cached=False)


@router.post(
    "/search",
    response_model=SearchResponse,
    responses={422: {"model": ErrorResponse}},
)
async def search_text(
    req: SearchRequest,
    engine: Optional[ProjectionEngine] = Depends(get_engine),
    loads: ProjectionLoadCache = Depends(get_loads),
):
    """One-shot search: sanitize, parse, detect, validate and transform one input."""
    context = MapContext(
        center_longitude=req.center_longitude,
        spatial_reference=req.target_wkid or SETTINGS.default_target_wkid,
    )
    search = CoordinateSearch(lambda: context, engine, loads, _preference(req.preference))
    try:
        result = await search.search(req.text)
    except CoordinateSearchError as exc:
        return _error_response(exc)
    logger.info(
        "search.done confidence=%.2f", result.confidence, extra={"stage": "search", "epsg": result.projection.epsg}
    )
    return SearchResponse(**summarize_result(result))


@router.websocket("/live")
async def live_search(
    websocket: WebSocket,
    preference: Optional[str] = Query(default=None),
    wkid: Optional[int] = Query(default=None),
    lon: Optional[float] = Query(default=None),
    engine: Optional[ProjectionEngine] = Depends(get_engine),
    loads: ProjectionLoadCache = Depends(get_loads),
):
    """Type-as-you-go search over a websocket.

    Each text frame is one keystroke's worth of input. Frames are debounced and
    sequenced, so only the latest input's outcome is sent back, as
    {"ok": true, "result": {...}} or {"ok": false, "error": key}.
    """
    try:
        pref = _preference(preference)
    except ValueError:
        await websocket.close(code=1008)
        return
    await websocket.accept()

    context = MapContext(center_longitude=lon, spatial_reference=wkid or SETTINGS.default_target_wkid)
    outbox: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def on_success(result: CoordinateSearchResult) -> None:
        outbox.put_nowait({"ok": True, "result": summarize_result(result)})

    def on_error(key: str) -> None:
        outbox.put_nowait({"ok": False, "error": key})

    search = CoordinateSearch(lambda: context, engine, loads, pref, on_success=on_success, on_error=on_error)
    debounced = Debouncer(search.submit, delay=SETTINGS.search_debounce_s)

    async def sender() -> None:
        while True:
            message = await outbox.get()
            await websocket.send_json(message)

    send_task = asyncio.create_task(sender())
    try:
        while True:
            debounced(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.info("live.disconnect", extra={"sequence": search.sequence, "stage": "live"})
    finally:
        debounced.cancel()
        send_task.cancel()


__all__ = ["router", "get_engine", "get_loads", "get_cache"]
