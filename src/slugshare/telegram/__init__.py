"""Telegram Bot API transport."""

from .telegram_client import BotAPI, ChatTransport, TelegramClient, UpdateBatch
from .telegram_errors import TelegramAPIError
from .telegram_schemas import TelegramUpdate

__all__ = [
    "BotAPI",
    "ChatTransport",
    "TelegramAPIError",
    "TelegramClient",
    "TelegramUpdate",
    "UpdateBatch",
]
