"""Tokenizer turning chat message text into typed bot commands.

Only messages that begin with a known command word are recognised. Parsing
is permissive in the same way for every command: malformed input is
classified as :class:`Unrecognized` and the bot stays silent.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..files.files_models import MediaKind


@dataclass(frozen=True, slots=True)
class Resolve:
    """``/start [slug]``; ``slug`` is ``None`` for a plain ``/start``."""

    slug: str | None = None


@dataclass(frozen=True, slots=True)
class Register:
    """``/add <slug> <file_id> <kind> <caption...>``."""

    slug: str
    media_handle: str
    media_kind: MediaKind
    caption: str


@dataclass(frozen=True, slots=True)
class Status:
    pass


@dataclass(frozen=True, slots=True)
class Help:
    pass


@dataclass(frozen=True, slots=True)
class Unrecognized:
    pass


Command = Resolve | Register | Status | Help | Unrecognized


def _split_command_word(text: str) -> tuple[str, str] | None:
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None
    parts = stripped.split(maxsplit=1)
    # "/start@sorrybabubot" addresses the bot explicitly in group chats
    name = parts[0][1:].partition("@")[0]
    rest = parts[1] if len(parts) > 1 else ""
    return name, rest


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _parse_register(rest: str) -> Command:
    # the caption ends at the first line break
    fields = rest.split("\n", 1)[0].split(maxsplit=3)
    if len(fields) < 4:
        return Unrecognized()
    slug, media_handle, raw_kind, caption = fields
    kind = MediaKind.parse(raw_kind)
    if kind is None:
        return Unrecognized()
    caption = _unquote(caption)
    if not caption.strip():
        return Unrecognized()
    return Register(slug=slug, media_handle=media_handle, media_kind=kind, caption=caption)


def parse_command(text: str | None) -> Command:
    """Classify ``text`` into one of the supported commands."""
    if not text:
        return Unrecognized()
    split = _split_command_word(text)
    if split is None:
        return Unrecognized()
    name, rest = split

    if name == "start":
        tokens = rest.split()
        return Resolve(slug=tokens[0] if tokens else None)
    if name == "add":
        return _parse_register(rest)
    if name == "status":
        return Status()
    if name == "help":
        return Help()
    return Unrecognized()


__all__ = [
    "Command",
    "Help",
    "Register",
    "Resolve",
    "Status",
    "Unrecognized",
    "parse_command",
]
