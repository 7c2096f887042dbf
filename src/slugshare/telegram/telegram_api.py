"""Webhook route receiving Telegram updates."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request
from pydantic import ValidationError

from ..commands.commands_service import UpdateDispatcher
from .telegram_schemas import TelegramUpdate

logger = structlog.get_logger(__name__)


def get_dispatcher(request: Request) -> UpdateDispatcher:
    try:
        return request.app.state.bot_context.dispatcher  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Bot context is not configured") from exc


def build_webhook_router(bot_token: str) -> APIRouter:
    """Return a router accepting updates on ``POST /<bot_token>``.

    The update is handled after the response is sent so Telegram never waits
    on database or delivery calls.
    """
    router = APIRouter(tags=["telegram"])

    @router.post(f"/{bot_token}", include_in_schema=False)
    async def receive_update(
        background_tasks: BackgroundTasks,
        payload: dict[str, Any] = Body(...),
        dispatcher: UpdateDispatcher = Depends(get_dispatcher),
    ) -> dict[str, bool]:
        try:
            update = TelegramUpdate.model_validate(payload)
        except ValidationError:
            # acknowledged anyway, otherwise Telegram retries it forever
            logger.warning("telegram.update.invalid", update_id=payload.get("update_id"))
            return {"ok": True}
        background_tasks.add_task(dispatcher.dispatch, update)
        return {"ok": True}

    return router


__all__ = ["build_webhook_router", "get_dispatcher"]
