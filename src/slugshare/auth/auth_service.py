"""Admin gate for mutating and privileged bot commands."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AdminGate:
    """Recognise the single Telegram user allowed to manage files."""

    admin_id: int

    def is_privileged(self, user_id: int | None) -> bool:
        return user_id is not None and user_id == self.admin_id


__all__ = ["AdminGate"]
