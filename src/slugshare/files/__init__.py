"""Slug to media registry."""

from .files_models import MediaDescriptor, MediaKind, RegisterOutcome
from .files_repository import FileRepository

__all__ = ["FileRepository", "MediaDescriptor", "MediaKind", "RegisterOutcome"]
