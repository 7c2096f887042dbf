"""Two-phase slug resolution and media delivery.

Phase 1 (``/start <slug>``) looks the slug up and answers with a single
inline button whose callback data is the slug itself. Phase 2 runs when the
button is pressed: the slug is looked up again, the button press is
acknowledged, and only then is the media sent. Nothing is remembered between
the phases; the button carries all the state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Protocol

import structlog

from .. import messages
from ..exceptions import AppError
from ..files.files_models import MediaDescriptor, MediaKind
from ..telegram.telegram_client import ChatTransport
from ..telegram.telegram_schemas import inline_button_markup

logger = structlog.get_logger(__name__)


class DescriptorLookup(Protocol):
    async def lookup(self, slug: str) -> MediaDescriptor | None:
        """Return the descriptor registered for ``slug``."""


class DeliveryOutcome(str, Enum):
    WELCOME = "welcome"
    NOT_FOUND = "not_found"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DELIVERED = "delivered"
    UNKNOWN_KIND = "unknown_kind"
    FAILED = "failed"


@dataclass(slots=True)
class DeliveryService:
    files: DescriptorLookup
    transport: ChatTransport
    welcome_text: str

    async def resolve(self, chat_id: int, slug: str | None) -> DeliveryOutcome:
        """Phase 1: present the confirmation button for ``slug``."""
        if not slug:
            await self.transport.send_message(chat_id, self.welcome_text)
            return DeliveryOutcome.WELCOME

        descriptor = await self.files.lookup(slug)
        if descriptor is None:
            await self.transport.send_message(chat_id, messages.FILE_NOT_FOUND)
            logger.info("delivery.resolve.not_found", slug=slug, chat_id=chat_id)
            return DeliveryOutcome.NOT_FOUND

        await self.transport.send_message(
            chat_id,
            messages.file_prompt(descriptor.caption),
            reply_markup=inline_button_markup(messages.SEND_BUTTON_LABEL, descriptor.slug),
        )
        return DeliveryOutcome.AWAITING_CONFIRMATION

    async def deliver(self, callback_query_id: str, chat_id: int, slug: str) -> DeliveryOutcome:
        """Phase 2: acknowledge the button press, then send the media.

        Failures are reported to the user: through the callback answer while
        it is still unused, as a chat message once it has been spent on the
        progress notice.
        """
        acknowledged = False
        try:
            descriptor = await self.files.lookup(slug)
            if descriptor is None:
                await self.transport.answer_callback_query(
                    callback_query_id, messages.FILE_NOT_FOUND
                )
                logger.info("delivery.deliver.not_found", slug=slug, chat_id=chat_id)
                return DeliveryOutcome.NOT_FOUND

            await self.transport.answer_callback_query(callback_query_id, messages.SENDING_FILE)
            acknowledged = True

            send = self._sender_for(descriptor.kind)
            if send is None:
                logger.warning(
                    "delivery.deliver.unknown_kind",
                    slug=slug,
                    media_kind=descriptor.media_kind,
                )
                await self.transport.send_message(chat_id, messages.UNKNOWN_FILE_TYPE)
                return DeliveryOutcome.UNKNOWN_KIND

            await send(chat_id, descriptor.media_handle, caption=descriptor.caption or "")
        except AppError:
            logger.exception("delivery.deliver.failed", slug=slug, chat_id=chat_id)
            if acknowledged:
                await self.transport.send_message(chat_id, messages.ERROR_SENDING_FILE)
            else:
                await self.transport.answer_callback_query(
                    callback_query_id, messages.ERROR_SENDING_FILE
                )
            return DeliveryOutcome.FAILED

        logger.info(
            "delivery.dispatched", slug=slug, chat_id=chat_id, media_kind=descriptor.media_kind
        )
        return DeliveryOutcome.DELIVERED

    async def dismiss(self, callback_query_id: str) -> None:
        """Answer a button press that cannot be served so the client stops waiting."""
        await self.transport.answer_callback_query(callback_query_id)

    def _sender_for(
        self, kind: MediaKind | None
    ) -> Callable[..., Awaitable[None]] | None:
        senders = {
            MediaKind.PHOTO: self.transport.send_photo,
            MediaKind.VIDEO: self.transport.send_video,
            MediaKind.DOCUMENT: self.transport.send_document,
        }
        return senders.get(kind) if kind is not None else None


__all__ = ["DeliveryOutcome", "DeliveryService", "DescriptorLookup"]
