"""
Distributor Platform API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.errors import register_error_handlers
from services.platform import Platform, build_platform, build_repositories
from settings import load_settings


def create_app(platform: Optional[Platform] = None) -> FastAPI:
    """
    Build the application.

    Without an explicit platform, settings are read from the environment and
    the configured persistence backend is used.
    """
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if platform is None:
        platform = build_platform(build_repositories(settings), settings)

    app = FastAPI(
        title="Distributor Platform API",
        description="REST API for distributor wallets, order pricing and schemes",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.platform = platform

    # Configure CORS - Allow all origins for development
    # TODO: Restrict origins once the dashboard has a fixed production host
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/health", tags=["Health"])
    def health_check():
        """
        Health check endpoint.

        Returns the API status and version.
        """
        return {
            "status": "healthy",
            "version": __version__,
            "service": "distributor-platform-api"
        }

    from api.routers import catalog, distributors, notifications, orders, quotes, users

    app.include_router(quotes.router, prefix="/api/v1", tags=["Quotes"])
    app.include_router(orders.router, prefix="/api/v1", tags=["Orders"])
    app.include_router(distributors.router, prefix="/api/v1", tags=["Distributors"])
    app.include_router(catalog.router, prefix="/api/v1", tags=["Catalog"])
    app.include_router(notifications.router, prefix="/api/v1", tags=["Notifications"])
    app.include_router(users.router, prefix="/api/v1", tags=["Users"])

    return app


app = create_app()
