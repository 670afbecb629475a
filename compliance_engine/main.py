"""FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from compliance_engine import __version__
from compliance_engine.core.api import (
    cache_router,
    conflicts_router,
    evaluate_router,
    layout_router,
    rules_router,
)
from compliance_engine.core.api.dependencies import get_loader
from compliance_engine.core.config import get_settings
from compliance_engine.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting %s...", settings.app_name)
    logger.info("Rules directory: %s", settings.rules_dir)
    logger.info("Evaluation cache enabled: %s", settings.evaluation_cache_enabled)

    loader = get_loader()
    logger.info("Rules loaded: %d", len(loader.get_all_rules()))

    yield

    # Shutdown
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Decision-tree rule interpreter with cross-jurisdiction conflict detection",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS middleware - configurable via CORS_ORIGINS env var
    cors_origins_str = os.getenv("CORS_ORIGINS", "*")
    cors_origins = cors_origins_str.split(",") if cors_origins_str != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(evaluate_router)   # /evaluate, /evaluate/partial
    app.include_router(rules_router)      # /rules
    app.include_router(layout_router)     # /layout
    app.include_router(conflicts_router)  # /conflicts
    app.include_router(cache_router)      # /cache

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "endpoints": {
                "evaluate": "/evaluate - Evaluate facts against a rule tree",
                "partial": "/evaluate/partial - Reachable outcomes for incomplete facts",
                "rules": "/rules - Rule inspection",
                "layout": "/layout - Canvas layout with highlighted evaluation path",
                "conflicts": "/conflicts - Cross-jurisdiction conflict detection",
                "cache": "/cache/* - Evaluation cache statistics and control",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
