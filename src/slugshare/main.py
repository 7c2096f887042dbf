"""FastAPI application entry point."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from .config import BotConfig, load_config
from .dependencies import BotContext, build_context
from .exceptions import ConfigurationError
from .health.health_api import SERVICE_VERSION
from .health.health_api import router as health_router
from .lifecycle import start_bot, stop_bot
from .logging import configure_logging
from .telegram.telegram_api import build_webhook_router

logger = structlog.get_logger(__name__)


def create_app(
    config: BotConfig | None = None,
    *,
    context: BotContext | None = None,
) -> FastAPI:
    """Build FastAPI instance with the bot runtime bound to its lifespan."""
    cfg = config or load_config()
    configure_logging(cfg.log_level, secrets=(cfg.bot_token,))
    bot_context = context or build_context(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        runtime = await start_bot(bot_context)
        app.state.bot_runtime = runtime
        try:
            yield
        finally:
            await stop_bot(runtime)

    app = FastAPI(title=cfg.bot_title, version=SERVICE_VERSION, lifespan=lifespan)
    app.state.config = cfg
    app.state.bot_context = bot_context
    app.include_router(health_router)
    app.include_router(build_webhook_router(cfg.bot_token))
    return app


def run() -> None:
    """Serve the bot; exits with status 1 when BOT_TOKEN is missing."""
    configure_logging()
    try:
        config = load_config()
    except ConfigurationError as exc:
        logger.error("config.invalid", error=str(exc))
        raise SystemExit(1) from exc

    app = create_app(config)
    logger.info("server.starting", port=config.port, environment=config.environment)
    uvicorn.run(app, host="0.0.0.0", port=config.port)


__all__ = ["create_app", "run"]
