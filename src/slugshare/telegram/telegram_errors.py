"""Errors raised by the Telegram Bot API client."""

from ..exceptions import AppError


class TelegramAPIError(AppError):
    """Raised when a Bot API call fails or Telegram rejects it."""

    def __init__(self, method: str, description: str, status_code: int | None = None) -> None:
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.status_code = status_code
