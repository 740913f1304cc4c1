import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.cache import build_cache_from_env
from app.coordinates import router as coordinates_router
from app.crs.transform import ProjectionLoadCache, PyprojEngine
from app.logging_setup import configure_logging, logging_middleware
from app.settings import SETTINGS

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Redis needs a running loop to ping; requests made before startup use the no-op cache
    app.state.cache = await build_cache_from_env()
    try:
        yield
    finally:
        await app.state.cache.close()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="SWEREF 99 coordinate search", lifespan=lifespan)
    app.middleware("http")(logging_middleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(coordinates_router)

    app.state.projection_engine = PyprojEngine()
    app.state.projection_loads = ProjectionLoadCache(SETTINGS.projection_load_timeout_s)
    logger.info("app.created preference=%s wkid=%s", SETTINGS.default_preference, SETTINGS.default_target_wkid)
    return app


app = create_app()
