"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from phonebot.bot.router import router as bot_router
from phonebot.config import get_settings
from phonebot.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    settings = get_settings()

    logger.info(
        "Application starting",
        extra={"env": settings.app_env, "telephony_provider": settings.telephony_provider.value},
    )

    yield

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are loaded here so a misconfigured deployment fails at startup.
    """
    settings = get_settings()

    app = FastAPI(
        title="PhoneBot",
        description="Connects two chat participants by phone",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.include_router(bot_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=3978)
