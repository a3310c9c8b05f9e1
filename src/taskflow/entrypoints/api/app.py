"""FastAPI application definition."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskflow import __version__

from .deps import Services, lifespan, settings
from .errors import register_exception_handlers
from .routes import api_router


def create_app(services: Services | None = None) -> FastAPI:
    """Build the application.

    Args:
        services: Pre-wired services; the lifespan builds in-memory ones
            when omitted.
    """
    app = FastAPI(
        title="taskflow",
        description="Task and team collaboration backend",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,  # Prevent 307 redirects that lose auth headers
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
