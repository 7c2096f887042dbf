"""Database models for the files registry."""

from .db_models import Base, FileModel

__all__ = ["Base", "FileModel"]
