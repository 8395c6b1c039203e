"""Pydantic v2 schemas for the Lesson document and lesson API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from darija_lessons.schemas.activity import Activity, Difficulty, DocumentModel
from darija_lessons.services.ids import new_id, utcnow

View = Literal["list", "setup", "builder"]


class Lesson(DocumentModel):
    """A lesson: intro material plus an ordered list of activities.

    Attributes:
        id: Stable identifier; the lesson store keys on it.
        title: Lesson title.
        description: Short description.
        level: Target level.
        objectives: Learning objectives (never empty).
        intro_parts: Instructional text shown on the intro step.
        activities: Activities in display and step order.
        tags: Free-form tags.
        current_view: Authoring view (``list``, ``setup`` or ``builder``).
        is_saved: Whether the lesson has been written to the store.
        is_published: Whether the author published the lesson.
        created_at: Creation time.
        updated_at: Last mutation time (never moves backwards).
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str = ""
    level: Difficulty = "beginner"
    objectives: list[str] = Field(default_factory=lambda: [""], min_length=1)
    intro_parts: list[str] = Field(default_factory=lambda: [""])
    activities: list[Activity] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    current_view: View = "list"
    is_saved: bool = False
    is_published: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class LessonListResponse(BaseModel):
    """Response for GET /lessons.

    Attributes:
        lessons: Stored lessons.
        count: Number of lessons returned.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    lessons: list[Lesson]
    count: int


class HealthResponse(BaseModel):
    """Response for GET /health.

    Attributes:
        status: Service status.
        timestamp: Current server time.
        version: Application version.
        lesson_store: Store backend and its status.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    status: str = Field(..., pattern=r"^(ok|degraded)$")
    timestamp: datetime
    version: str
    lesson_store: dict[str, str] = Field(default_factory=dict)
