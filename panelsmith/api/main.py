"""
Panelsmith FastAPI Application

Job creation, polling and identity endpoints over the generation pipelines.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from panelsmith import __version__
from panelsmith.core.config import load_config, set_config
from panelsmith.core.exceptions import JobNotFoundError
from panelsmith.core.logging_config import get_logger, setup_logging

from .deps import Services, build_services
from .limiter import limiter
from .routers import generation, health, identities, jobs, panels, suggestions
from .settings import Settings, get_settings

logger = get_logger("api.main")


async def job_not_found_handler(request: Request, exc: JobNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Job not found", "jobId": exc.job_id})


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        services: Store and capability clients (built from config if omitted)
        settings: Server settings (environment if omitted)
    """
    settings = settings or get_settings()
    if services is None:
        config = load_config(settings.config_path) if settings.config_path else None
        if config is not None:
            set_config(config)
        services = build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info("Starting Panelsmith API...")
        app.state.services.store.start_sweeper()
        yield
        await app.state.services.store.stop_sweeper()
        logger.info("Shutting down Panelsmith API...")

    app = FastAPI(
        title="Panelsmith API",
        description="Background comic generation with pollable jobs",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.settings = settings

    # Add rate limiter to app state
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(JobNotFoundError, job_not_found_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(jobs.router, prefix="/api", tags=["jobs"])
    app.include_router(generation.router, prefix="/api", tags=["generation"])
    app.include_router(identities.router, prefix="/api", tags=["identities"])
    app.include_router(suggestions.router, prefix="/api", tags=["suggestions"])
    app.include_router(panels.router, prefix="/api", tags=["panels"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"name": "Panelsmith API", "version": __version__, "status": "running"}

    return app


def run(
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: Optional[bool] = None,
    log_level: Optional[str] = None,
):
    """Run the server. ``log_level`` overrides the settings value."""
    settings = get_settings()
    log_level = log_level or settings.log_level
    setup_logging(log_level, verbose=settings.debug)
    uvicorn.run(
        "panelsmith.api.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.debug if reload is None else reload,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    run()
