"""User-facing texts sent by the bot."""

from __future__ import annotations

from html import escape

FILE_NOT_FOUND = "❌ File not found!"
FILE_AVAILABLE = "File available"
SEND_BUTTON_LABEL = "📹 Send me"
SENDING_FILE = "⏳ Sending file..."
UNKNOWN_FILE_TYPE = "❌ Unknown file type"
NOT_AUTHORIZED = "❌ You are not authorized to use this command"

ERROR_RETRIEVING_FILE = "❌ Error retrieving file"
ERROR_ADDING_FILE = "❌ Error adding file"
ERROR_RETRIEVING_STATUS = "❌ Error retrieving status"
ERROR_SENDING_FILE = "❌ Error sending file!"
GENERIC_ERROR = "❌ Something went wrong"

HELP = (
    "📚 Available Commands:\n\n"
    "/start <slug> - Get a file by slug\n"
    "/help - Show this message\n\n"
    "👨‍💼 Admin Commands:\n"
    "/add <slug> <file_id> <type> <caption> - Add a new file\n"
    "/status - Show bot status"
)


def welcome(bot_title: str, sample_link: str) -> str:
    return (
        f"🤖 Welcome to {bot_title}!\n\n"
        "I can help you share and retrieve files securely.\n\n"
        "📌 Test the bot:\n"
        f"Use: {sample_link}\n\n"
        "💡 Commands:\n"
        "/start <slug> - Get a file\n"
        "/help - Show help"
    )


def file_prompt(caption: str | None) -> str:
    return f"📄 {caption or FILE_AVAILABLE}"


def slug_exists(slug: str) -> str:
    return f'❌ Slug "{slug}" already exists!'


def file_added(*, slug: str, media_kind: str, caption: str, share_link: str) -> str:
    """HTML confirmation for ``/add``; user supplied values are escaped."""
    return (
        "✅ File added successfully!\n\n"
        "📋 Details:\n"
        f"Slug: <code>{escape(slug)}</code>\n"
        f"Type: {escape(media_kind)}\n"
        f"Caption: {escape(caption)}\n\n"
        "🔗 Share link:\n"
        f"<code>{escape(share_link)}</code>"
    )


def status_report(*, total_files: int, environment: str) -> str:
    return (
        "📊 Bot Status\n\n"
        f"📦 Total files: <b>{total_files}</b>\n"
        "🤖 Bot: <b>Active</b>\n"
        f"⚙️ Environment: <b>{escape(environment)}</b>"
    )
