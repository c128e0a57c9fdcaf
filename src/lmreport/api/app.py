from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from lmreport import __version__
from lmreport.api.exception_handlers import register_exception_handlers
from lmreport.api.routes import router
from lmreport.config import Settings, get_settings
from lmreport.incoming import IncomingStore
from lmreport.logging_config import configure_logging
from lmreport.watcher import ChangeWatcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting license report API, incoming directory: {app.state.settings.INCOMING_DIR}")
    yield
    logger.info("Shutting down license report API...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API; each app owns its incoming store and change watcher."""
    settings = settings or get_settings()
    configure_logging(level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR)

    app = FastAPI(
        title="License Report API",
        version=__version__,
        description="Usage data extracted from license manager status reports.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = IncomingStore(settings.INCOMING_DIR, settings.MAX_UPLOAD_BYTES)
    app.state.watcher = ChangeWatcher(settings.INCOMING_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app
