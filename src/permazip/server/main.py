"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from permazip.core.context import PermazipContext, create_context
from permazip.server.config import ServerConfig
from permazip.server.routes import router as archives_router
from permazip.services.archive_service import ArchiveService

logger = logging.getLogger(__name__)


def _install_service(app: FastAPI, context: PermazipContext) -> None:
    service = ArchiveService(context)
    service.ensure_download_dir()
    if context.config.allow_untokenized_downloads:
        logger.warning(
            "Untokenized downloads are enabled: /download?type&slug serves archives "
            "without authentication"
        )
    app.state.service = service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup.

    Creates production context with real implementations on startup.
    """
    _install_service(app, create_context())
    yield


def create_app(context: PermazipContext | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        context: Optional PermazipContext for testing. If None, uses lifespan
                 to create production context.

    Returns:
        Configured FastAPI application
    """
    if context is not None:
        app = FastAPI(
            title="Permazip",
            description="Permanent download links for plugin and theme archives",
            version="0.1.0",
        )
        _install_service(app, context)
    else:
        app = FastAPI(
            title="Permazip",
            description="Permanent download links for plugin and theme archives",
            version="0.1.0",
            lifespan=lifespan,
        )

    app.include_router(archives_router)

    return app


def run() -> None:
    """Run the server (entry point for CLI)."""
    config = ServerConfig.from_env()
    app = create_app()
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    run()
