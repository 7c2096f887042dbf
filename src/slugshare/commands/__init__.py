"""Chat command parsing and execution."""

from .commands_parser import Command, Help, Register, Resolve, Status, Unrecognized, parse_command
from .commands_service import CommandService, UpdateDispatcher

__all__ = [
    "Command",
    "CommandService",
    "Help",
    "Register",
    "Resolve",
    "Status",
    "Unrecognized",
    "UpdateDispatcher",
    "parse_command",
]
