"""
HARKA admin service application.

Run with:
    harka-admin
or:
    uvicorn harka.main:app --port 8001
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api.responses import register_exception_handlers
from .config import HarkaConfig, get_config
from .core.container import Container
from .infrastructure import setup_logging
from .routers import register_routers

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[HarkaConfig] = None,
    container: Optional[Container] = None,
) -> FastAPI:
    """
    Build the admin application.

    Args:
        config: Configuration; loaded from config/ and the environment if omitted
        container: Prebuilt container (tests inject one with their own repository)
    """
    if container is None:
        container = Container(config or get_config())
    config = container.config

    setup_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"✅ HARKA admin service started ({config.environment})")
        if not config.admin_token:
            logger.warning("⚠️ No admin token configured; admin routes are open")
        yield
        await container.aclose()

    app = FastAPI(
        title="HARKA Admin Services",
        version=__version__,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.container = container

    register_exception_handlers(app)
    register_routers(app)

    @app.get("/health", tags=["health"])
    async def health():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": config.environment,
            "backup_backend": config.backup.backend,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("harka.main:app", host="0.0.0.0", port=8001)


if __name__ == "__main__":
    run()
