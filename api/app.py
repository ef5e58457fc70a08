"""
FastAPI application factory.

Creates the payment landing server: the gateway redirects the browser here
after a wallet top-up and the server verifies the payment against the
backend using the locally stored session.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import get_settings

from .dependencies import get_container
from .routes import health, payment, session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting landing server on {settings.host}:{settings.port}")
    logger.info(f"Backend: {settings.api_url}")
    yield
    # Shutdown
    await get_container().aclose()
    logger.info("Shutting down landing server")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} Landing",
        description="Payment gateway landing server for the RechargeEarn client",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(payment.router, prefix="/payment", tags=["payment"])
    app.include_router(session.router, tags=["session"])

    return app


# Application instance for uvicorn
app = create_app()
