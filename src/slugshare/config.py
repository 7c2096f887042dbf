"""Application configuration for the SlugShare bot.

Values are read from the process environment (and a local ``.env`` file).
``BOT_TOKEN`` is the only mandatory setting; everything else has a default
matching the production deployment.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_ADMIN_ID = 6319246165


class BotConfig(BaseSettings):
    """Pydantic settings container for the bot process."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    bot_token: str = Field(
        ...,
        min_length=1,
        description="Telegram Bot API credential.",
    )
    admin_id: int = Field(
        default=DEFAULT_ADMIN_ID,
        description="Telegram user id allowed to register files and read status.",
    )
    environment: Literal["polling", "webhook"] = Field(
        default="polling",
        description="How updates reach the bot: long polling or webhook push.",
    )
    webhook_url: str | None = Field(
        default=None,
        description="Externally reachable base URL used to register the webhook.",
    )
    port: int = Field(default=3000, ge=1, le=65535)
    database_url: str = Field(
        default="sqlite+aiosqlite:///bot.db",
        description="SQLAlchemy async DSN of the files database.",
    )
    bot_username: str = Field(
        default="sorrybabubot",
        min_length=1,
        description="Bot username used to build t.me deep links.",
    )
    bot_title: str = Field(
        default="SorryBabu Bot",
        description="Display name used in the welcome message and service info.",
    )
    seed_demo_file: bool = Field(
        default=True,
        description="Insert the demo slug on startup when it is missing.",
    )
    telegram_api_base: str = Field(default="https://api.telegram.org")
    telegram_timeout_seconds: float = Field(default=35.0, ge=1.0)
    polling_timeout_seconds: int = Field(
        default=30,
        ge=0,
        description="Long polling timeout passed to getUpdates.",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level of emitted log events.",
    )

    def deep_link(self, slug: str) -> str:
        """Return the shareable t.me link that starts the bot with ``slug``."""

        return f"https://t.me/{self.bot_username}?start={slug}"


def load_config(**overrides: object) -> BotConfig:
    """Load configuration, failing fast when the bot token is absent."""

    try:
        return BotConfig(**overrides)
    except ValidationError as exc:
        failed_fields = {
            ".".join(str(part) for part in error["loc"])
            for error in exc.errors()
        }
        if "bot_token" in failed_fields:
            raise ConfigurationError("BOT_TOKEN environment variable is not set") from exc
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["BotConfig", "DEFAULT_ADMIN_ID", "load_config"]
