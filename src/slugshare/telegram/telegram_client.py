"""Telegram Bot API client and the transport protocol the bot core relies on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from .telegram_errors import TelegramAPIError
from .telegram_schemas import TelegramUpdate

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class UpdateBatch:
    """Result of one ``getUpdates`` call."""

    next_offset: int | None
    updates: list[TelegramUpdate] = field(default_factory=list)


class ChatTransport(Protocol):
    """Outbound chat operations used by command handling and delivery."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = None,
        reply_markup: dict[str, Any] | None = None,
    ) -> None:
        """Send a text message, optionally with HTML formatting and buttons."""

    async def answer_callback_query(self, callback_query_id: str, text: str | None = None) -> None:
        """Acknowledge a button press in the originating chat."""

    async def send_photo(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        """Send a previously uploaded photo by ``file_id``."""

    async def send_video(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        """Send a previously uploaded video by ``file_id``."""

    async def send_document(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        """Send a previously uploaded document by ``file_id``."""


class BotAPI(ChatTransport, Protocol):
    """Transport plus the update-source operations used at startup and shutdown."""

    async def set_webhook(self, url: str) -> None:
        """Ask Telegram to push updates to ``url``."""

    async def delete_webhook(self) -> None:
        """Stop webhook delivery so that ``get_updates`` works."""

    async def get_updates(self, *, offset: int | None = None, timeout: int = 30) -> UpdateBatch:
        """Long-poll for pending updates."""

    async def aclose(self) -> None:
        """Release network resources."""


class TelegramClient:
    """Thin async wrapper around the HTTPS Bot API."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = "https://api.telegram.org",
        timeout_seconds: float = 35.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = f"{api_base.rstrip('/')}/bot{token}"
        self._timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> Any:
        url = f"{self._base_url}/{method}"
        try:
            response = await self._client.post(
                url,
                json=payload,
                timeout=timeout or self._timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise TelegramAPIError(method, f"transport error: {exc.__class__.__name__}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise TelegramAPIError(
                method, "response is not JSON", status_code=response.status_code
            ) from exc

        if not isinstance(body, dict):
            raise TelegramAPIError(
                method, "unexpected response", status_code=response.status_code
            )
        if response.status_code != 200 or not body.get("ok"):
            description = body.get("description") or "Unknown error"
            raise TelegramAPIError(method, description, status_code=response.status_code)
        return body.get("result")

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = None,
        reply_markup: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_markup:
            payload["reply_markup"] = reply_markup
        await self._call("sendMessage", payload)

    async def answer_callback_query(self, callback_query_id: str, text: str | None = None) -> None:
        payload: dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        await self._call("answerCallbackQuery", payload)

    async def send_photo(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        await self._call("sendPhoto", {"chat_id": chat_id, "photo": media_handle, "caption": caption})

    async def send_video(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        await self._call("sendVideo", {"chat_id": chat_id, "video": media_handle, "caption": caption})

    async def send_document(self, chat_id: int, media_handle: str, *, caption: str = "") -> None:
        await self._call(
            "sendDocument", {"chat_id": chat_id, "document": media_handle, "caption": caption}
        )

    async def set_webhook(self, url: str) -> None:
        await self._call("setWebhook", {"url": url})

    async def delete_webhook(self) -> None:
        await self._call("deleteWebhook", {"drop_pending_updates": False})

    async def get_updates(self, *, offset: int | None = None, timeout: int = 30) -> UpdateBatch:
        """Long-poll for updates.

        Malformed entries are skipped but still move ``next_offset`` forward,
        otherwise Telegram would keep redelivering them.
        """
        payload: dict[str, Any] = {
            "timeout": timeout,
            "allowed_updates": ["message", "callback_query"],
        }
        if offset is not None:
            payload["offset"] = offset
        result = await self._call(
            "getUpdates", payload, timeout=self._timeout_seconds + timeout
        )
        if not isinstance(result, list):
            raise TelegramAPIError("getUpdates", "unexpected response")
        batch = UpdateBatch(next_offset=offset)
        for raw in result:
            if not isinstance(raw, dict):
                logger.warning("telegram.update.invalid", update_id=None)
                continue
            update_id = raw.get("update_id")
            if isinstance(update_id, int):
                batch.next_offset = max(batch.next_offset or 0, update_id + 1)
            try:
                batch.updates.append(TelegramUpdate.model_validate(raw))
            except ValidationError:
                logger.warning("telegram.update.invalid", update_id=update_id)
        return batch


__all__ = ["BotAPI", "ChatTransport", "TelegramClient", "UpdateBatch"]
