"""SlugShare: deliver registered Telegram media through deep-link slugs."""

from .config import BotConfig, load_config
from .dependencies import BotContext, build_context

__all__ = ["BotConfig", "BotContext", "build_context", "load_config"]
