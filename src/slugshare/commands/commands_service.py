"""Execute parsed chat commands and route incoming updates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

import structlog

from .. import messages
from ..auth.auth_service import AdminGate
from ..exceptions import AppError
from ..delivery.delivery_service import DeliveryService
from ..files.files_models import MediaKind, RegisterOutcome, is_linkable_slug
from ..telegram.telegram_client import ChatTransport
from ..telegram.telegram_schemas import TelegramCallbackQuery, TelegramMessage, TelegramUpdate
from .commands_parser import (
    Command,
    Help,
    Register,
    Resolve,
    Status,
    Unrecognized,
    parse_command,
)

logger = structlog.get_logger(__name__)


class FileRegistry(Protocol):
    async def register(
        self,
        slug: str,
        media_handle: str,
        media_kind: MediaKind | str,
        caption: str | None = None,
    ) -> RegisterOutcome:
        """Insert a new descriptor."""

    async def count(self) -> int:
        """Return the number of registered descriptors."""


_ERROR_TEXTS: dict[type, str] = {
    Resolve: messages.ERROR_RETRIEVING_FILE,
    Register: messages.ERROR_ADDING_FILE,
    Status: messages.ERROR_RETRIEVING_STATUS,
}


@dataclass(slots=True)
class CommandService:
    """Run one command on behalf of a chat user.

    ``Register`` and ``Status`` require the admin; everything else is open.
    """

    files: FileRegistry
    gate: AdminGate
    transport: ChatTransport
    delivery: DeliveryService
    environment: str
    share_link: Callable[[str], str]

    async def execute(self, command: Command, *, chat_id: int, user_id: int | None) -> None:
        if isinstance(command, Unrecognized):
            return
        try:
            await self._execute(command, chat_id=chat_id, user_id=user_id)
        except AppError:
            logger.exception(
                "bot.command.failed",
                command=type(command).__name__,
                chat_id=chat_id,
            )
            await self.transport.send_message(
                chat_id, _ERROR_TEXTS.get(type(command), messages.GENERIC_ERROR)
            )

    async def _execute(self, command: Command, *, chat_id: int, user_id: int | None) -> None:
        if isinstance(command, Resolve):
            await self.delivery.resolve(chat_id, command.slug)
        elif isinstance(command, Help):
            await self.transport.send_message(chat_id, messages.HELP)
        elif not self.gate.is_privileged(user_id):
            logger.warning(
                "bot.command.unauthorized",
                command=type(command).__name__,
                user_id=user_id,
            )
            await self.transport.send_message(chat_id, messages.NOT_AUTHORIZED)
        elif isinstance(command, Register):
            await self._register(command, chat_id=chat_id)
        elif isinstance(command, Status):
            total = await self.files.count()
            await self.transport.send_message(
                chat_id,
                messages.status_report(total_files=total, environment=self.environment),
                parse_mode="HTML",
            )

    async def _register(self, command: Register, *, chat_id: int) -> None:
        if not is_linkable_slug(command.slug):
            logger.warning("bot.command.unlinkable_slug", slug=command.slug)
        outcome = await self.files.register(
            command.slug,
            command.media_handle,
            command.media_kind,
            command.caption,
        )
        if outcome is RegisterOutcome.ALREADY_EXISTS:
            await self.transport.send_message(chat_id, messages.slug_exists(command.slug))
            return
        if outcome is RegisterOutcome.INVALID_KIND:
            # the parser only yields known kinds
            return
        await self.transport.send_message(
            chat_id,
            messages.file_added(
                slug=command.slug,
                media_kind=command.media_kind.value,
                caption=command.caption,
                share_link=self.share_link(command.slug),
            ),
            parse_mode="HTML",
        )


@dataclass(slots=True)
class UpdateDispatcher:
    """Entry point for every Telegram update, whichever way it arrived.

    Each update is handled in isolation: anything escaping a handler is
    logged here and never reaches the webhook endpoint or the polling loop.
    """

    commands: CommandService
    delivery: DeliveryService

    async def dispatch(self, update: TelegramUpdate) -> None:
        structlog.contextvars.bind_contextvars(update_id=update.update_id)
        try:
            if update.callback_query is not None:
                await self._handle_callback(update.callback_query)
            elif update.message is not None:
                await self._handle_message(update.message)
        except Exception:
            logger.exception("bot.update.failed")
        finally:
            structlog.contextvars.unbind_contextvars("update_id")

    async def _handle_message(self, message: TelegramMessage) -> None:
        command = parse_command(message.text)
        user_id = message.from_user.id if message.from_user else None
        await self.commands.execute(command, chat_id=message.chat.id, user_id=user_id)

    async def _handle_callback(self, query: TelegramCallbackQuery) -> None:
        if query.message is None or not query.data:
            logger.info("bot.callback.ignored", callback_query_id=query.id)
            await self.delivery.dismiss(query.id)
            return
        await self.delivery.deliver(query.id, query.message.chat.id, query.data)


__all__ = ["CommandService", "FileRegistry", "UpdateDispatcher"]
