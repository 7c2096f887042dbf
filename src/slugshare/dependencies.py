"""Dependency wiring helpers."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from . import messages
from .auth.auth_service import AdminGate
from .commands.commands_service import CommandService, UpdateDispatcher
from .config import BotConfig
from .db.db_init import DEMO_FILE, create_engine_and_sessions
from .delivery.delivery_service import DeliveryService
from .files.files_repository import FileRepository
from .telegram.telegram_client import BotAPI, TelegramClient


@dataclass(slots=True)
class BotContext:
    """Everything an update handler needs, built once per process."""

    config: BotConfig
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    files: FileRepository
    gate: AdminGate
    transport: BotAPI
    delivery: DeliveryService
    commands: CommandService
    dispatcher: UpdateDispatcher


def build_context(
    config: BotConfig,
    *,
    transport: BotAPI | None = None,
    engine: AsyncEngine | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> BotContext:
    """Assemble repositories and services around ``config``."""
    if engine is None or session_factory is None:
        engine, session_factory = create_engine_and_sessions(config.database_url)
    if transport is None:
        transport = TelegramClient(
            config.bot_token,
            api_base=config.telegram_api_base,
            timeout_seconds=config.telegram_timeout_seconds,
        )

    files = FileRepository(session_factory)
    gate = AdminGate(admin_id=config.admin_id)
    delivery = DeliveryService(
        files=files,
        transport=transport,
        welcome_text=messages.welcome(config.bot_title, config.deep_link(DEMO_FILE["slug"])),
    )
    commands = CommandService(
        files=files,
        gate=gate,
        transport=transport,
        delivery=delivery,
        environment=config.environment,
        share_link=config.deep_link,
    )
    return BotContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        files=files,
        gate=gate,
        transport=transport,
        delivery=delivery,
        commands=commands,
        dispatcher=UpdateDispatcher(commands=commands, delivery=delivery),
    )


__all__ = ["BotContext", "build_context"]
