"""Domain models for registered files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# t.me ?start= payloads; also keeps callback_data within its 64 byte limit
_LINKABLE_SLUG = re.compile(r"[A-Za-z0-9_-]{1,64}")


def is_linkable_slug(slug: str) -> bool:
    """Return whether ``slug`` can travel through a deep link and a button."""
    return _LINKABLE_SLUG.fullmatch(slug) is not None


class MediaKind(str, Enum):
    """Telegram delivery method a registered file is sent with."""

    PHOTO = "photo"
    VIDEO = "video"
    DOCUMENT = "document"

    @classmethod
    def parse(cls, value: str) -> "MediaKind | None":
        """Return the kind for an exact (case-sensitive) value, else ``None``."""
        try:
            return cls(value)
        except ValueError:
            return None


class RegisterOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    INVALID_KIND = "invalid_kind"


@dataclass(frozen=True, slots=True)
class MediaDescriptor:
    """A slug mapped to an opaque Telegram ``file_id``.

    ``media_kind`` keeps the raw stored value so rows written outside the
    bot with an unexpected type can still be read and reported.
    """

    slug: str
    media_handle: str
    media_kind: str
    caption: str | None = None

    @property
    def kind(self) -> MediaKind | None:
        return MediaKind.parse(self.media_kind)


__all__ = ["MediaDescriptor", "MediaKind", "RegisterOutcome", "is_linkable_slug"]
