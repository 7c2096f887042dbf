"""File registry backed by SQLAlchemy (asyncio)."""

from __future__ import annotations

import sqlalchemy as sa
import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.db_models import FileModel
from ..exceptions import handle_sqlalchemy_errors
from .files_models import MediaDescriptor, MediaKind, RegisterOutcome

logger = structlog.get_logger(__name__)


class FileRepository:
    """Map slugs to media descriptors stored in the ``files`` table.

    Rows are only ever inserted. Slug uniqueness is delegated to the primary
    key so that two concurrent ``register`` calls for the same slug cannot
    both succeed: the losing insert fails with ``IntegrityError`` and is
    reported as :attr:`RegisterOutcome.ALREADY_EXISTS`.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def lookup(self, slug: str) -> MediaDescriptor | None:
        with handle_sqlalchemy_errors(entity="files"):
            async with self._session_factory() as session:
                row = await session.get(FileModel, slug)
                if row is None:
                    return None
                return self._to_domain(row)

    async def register(
        self,
        slug: str,
        media_handle: str,
        media_kind: MediaKind | str,
        caption: str | None = None,
    ) -> RegisterOutcome:
        """Insert a new descriptor unless the slug is taken or the kind is unknown."""
        kind = media_kind if isinstance(media_kind, MediaKind) else MediaKind.parse(media_kind)
        if kind is None:
            logger.info("files.register.invalid_kind", slug=slug, media_kind=str(media_kind))
            return RegisterOutcome.INVALID_KIND

        with handle_sqlalchemy_errors(entity="files"):
            async with self._session_factory() as session:
                session.add(
                    FileModel(
                        slug=slug,
                        file_id=media_handle,
                        file_type=kind.value,
                        caption=caption,
                    )
                )
                try:
                    await session.commit()
                except sa_exc.IntegrityError:
                    await session.rollback()
                    if await session.get(FileModel, slug) is None:
                        raise
                    logger.info("files.register.duplicate", slug=slug)
                    return RegisterOutcome.ALREADY_EXISTS

        logger.info("files.register.created", slug=slug, media_kind=kind.value)
        return RegisterOutcome.CREATED

    async def count(self) -> int:
        with handle_sqlalchemy_errors(entity="files"):
            async with self._session_factory() as session:
                result = await session.execute(
                    sa.select(sa.func.count()).select_from(FileModel)
                )
                return int(result.scalar_one())

    @staticmethod
    def _to_domain(model: FileModel) -> MediaDescriptor:
        return MediaDescriptor(
            slug=model.slug,
            media_handle=model.file_id,
            media_kind=model.file_type,
            caption=model.caption,
        )


__all__ = ["FileRepository"]
