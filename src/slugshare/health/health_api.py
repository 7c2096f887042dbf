"""Liveness and service information routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..config import BotConfig

SERVICE_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


def get_config(request: Request) -> BotConfig:
    try:
        return request.app.state.config  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("BotConfig is not configured") from exc


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/")
def service_info(config: BotConfig = Depends(get_config)) -> dict[str, Any]:
    return {
        "name": config.bot_title,
        "status": "running",
        "environment": config.environment,
        "version": SERVICE_VERSION,
    }


__all__ = ["SERVICE_VERSION", "get_config", "router"]
