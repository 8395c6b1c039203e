"""SQLAlchemy ORM model for the lessons table."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from darija_lessons.models.base import Base


class LessonRecord(Base):
    """A persisted lesson document, upserted by lesson id.

    Attributes:
        id: Lesson identifier (primary key, never changes).
        title: Copy of the lesson title for listing.
        level: Copy of the lesson level.
        is_published: Whether the lesson has been published.
        document: The full Lesson JSON document (camelCase keys).
        created_at: Lesson creation time.
        updated_at: Lesson last-mutation time.
    """

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    level: Mapped[str] = mapped_column(String(20), nullable=False, default="beginner")
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    document: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<LessonRecord(id={self.id}, title='{self.title}')>"
