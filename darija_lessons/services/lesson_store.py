"""Lesson store: a persistent key-value collection of lessons keyed by id.

Two implementations share the :class:`LessonStore` protocol:

- :class:`InMemoryLessonStore` for tests and single-process development.
- :class:`SqlLessonStore` backed by the ``lessons`` table through an async
  SQLAlchemy session factory.

``upsert`` is idempotent: writing the same lesson id again overwrites it.
"""

import logging
from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from darija_lessons.exceptions import DatabaseConnectionError
from darija_lessons.models.lesson import LessonRecord
from darija_lessons.schemas.lesson import Lesson

logger = logging.getLogger(__name__)


@runtime_checkable
class LessonStore(Protocol):
    """Collaborator holding saved lessons."""

    async def load_all(self) -> list[Lesson]: ...

    async def get(self, lesson_id: str) -> Lesson | None: ...

    async def upsert(self, lesson: Lesson) -> None: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryLessonStore:
    """Process-local store; lessons are listed in first-saved order."""

    def __init__(self, lessons: list[Lesson] | None = None) -> None:
        self._lessons: dict[str, Lesson] = {}
        for lesson in lessons or []:
            self._lessons[lesson.id] = lesson.model_copy(deep=True)

    async def load_all(self) -> list[Lesson]:
        return [lesson.model_copy(deep=True) for lesson in self._lessons.values()]

    async def get(self, lesson_id: str) -> Lesson | None:
        lesson = self._lessons.get(lesson_id)
        return lesson.model_copy(deep=True) if lesson is not None else None

    async def upsert(self, lesson: Lesson) -> None:
        self._lessons[lesson.id] = lesson.model_copy(deep=True)
        logger.debug("Lesson upserted in memory: id=%s", lesson.id)

    def __len__(self) -> int:
        return len(self._lessons)


# ---------------------------------------------------------------------------
# SQL store
# ---------------------------------------------------------------------------


class SqlLessonStore:
    """Store lessons as JSON documents in the ``lessons`` table.

    Args:
        session_factory: Async session factory (``AsyncSessionLocal``).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_all(self) -> list[Lesson]:
        """Return every stored lesson, most recently updated first.

        Raises:
            DatabaseConnectionError: If the query fails.
        """
        try:
            async with self._session_factory() as session:
                stmt = select(LessonRecord).order_by(LessonRecord.updated_at.desc())
                result = await session.execute(stmt)
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Failed to load lessons: %s", exc)
            raise DatabaseConnectionError(str(exc)) from exc
        return [Lesson.model_validate(record.document) for record in records]

    async def get(self, lesson_id: str) -> Lesson | None:
        try:
            async with self._session_factory() as session:
                record = await session.get(LessonRecord, lesson_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to load lesson id=%s: %s", lesson_id, exc)
            raise DatabaseConnectionError(str(exc)) from exc
        if record is None:
            return None
        return Lesson.model_validate(record.document)

    async def upsert(self, lesson: Lesson) -> None:
        """Insert or overwrite the row for ``lesson.id``.

        Raises:
            DatabaseConnectionError: If the write fails.
        """
        document = lesson.model_dump(mode="json", by_alias=True)
        try:
            async with self._session_factory() as session:
                record = await session.get(LessonRecord, lesson.id)
                if record is None:
                    record = LessonRecord(id=lesson.id, created_at=lesson.created_at)
                    session.add(record)
                record.title = lesson.title
                record.level = lesson.level
                record.is_published = lesson.is_published
                record.document = document
                record.updated_at = lesson.updated_at
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to upsert lesson id=%s: %s", lesson.id, exc)
            raise DatabaseConnectionError(str(exc)) from exc
        logger.debug("Lesson upserted in database: id=%s", lesson.id)
