from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from loguru import logger

from ..services.client import GeminiClient
from ..services.orchestrator import CoPilotOrchestrator
from .routes import register_error_handlers, router
from .settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    copilot: Optional[CoPilotOrchestrator] = None,
) -> FastAPI:
    """Create and configure FastAPI instance."""
    settings = settings or get_settings()
    if copilot is None:
        copilot = CoPilotOrchestrator(settings, GeminiClient(settings))

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "ROOTS worker ready (analysis={}, creative={}, speech={}/{})",
            settings.analysis_model_id,
            settings.creative_model_id,
            settings.speech_model_id,
            settings.speech_voice,
        )
        if settings.api_key is None:
            logger.warning("No API key configured; remote calls rely on SDK environment defaults")
        yield

    app = FastAPI(title="ROOTS Worker", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.copilot = copilot
    app.include_router(router)
    register_error_handlers(app)
    return app


app = create_app()
