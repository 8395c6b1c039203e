"""SQLAlchemy ORM models for the Darija Lessons service."""

from darija_lessons.models.base import Base
from darija_lessons.models.lesson import LessonRecord

__all__ = [
    "Base",
    "LessonRecord",
]
