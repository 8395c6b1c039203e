"""
Lesson endpoints — GET /lessons, GET /lessons/{id}, PUT /lessons/{id}.

The lesson store is the only state; PUT is an idempotent upsert keyed by
the lesson id, refused with 422 when any activity fails validation.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from darija_lessons.api.dependencies import LessonStoreDep
from darija_lessons.exceptions import LessonNotFoundError, ValidationError
from darija_lessons.schemas.lesson import Lesson, LessonListResponse
from darija_lessons.services.validator import validate_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lessons", tags=["lessons"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _collect_activity_errors(lesson: Lesson) -> list[str]:
    """Validate every activity; prefix each error with its 1-based position."""
    errors: list[str] = []
    for position, activity in enumerate(lesson.activities, start=1):
        for message in validate_activity(activity):
            errors.append(f"Activity {position}: {message}")
    return errors


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("", response_model=LessonListResponse, summary="List saved lessons")
async def list_lessons(store: LessonStoreDep) -> LessonListResponse:
    lessons = await store.load_all()
    return LessonListResponse(lessons=lessons, count=len(lessons))


@router.get(
    "/{lesson_id}",
    response_model=Lesson,
    summary="Get a saved lesson",
    responses={404: {"description": "Lesson not found"}},
)
async def get_lesson(lesson_id: str, store: LessonStoreDep) -> Lesson:
    lesson = await store.get(lesson_id)
    if lesson is None:
        raise LessonNotFoundError(lesson_id)
    return lesson


@router.put(
    "/{lesson_id}",
    response_model=Lesson,
    summary="Create or replace a lesson",
    responses={
        400: {"description": "Path id and document id differ"},
        422: {"description": "An activity failed validation"},
    },
)
async def upsert_lesson(lesson_id: str, lesson: Lesson, store: LessonStoreDep) -> Lesson:
    """Upsert *lesson* under *lesson_id*.

    Every activity must pass the same validation the authoring session
    applies before saving a draft.
    """
    if lesson.id != lesson_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Document id {lesson.id!r} does not match path id {lesson_id!r}",
        )

    errors = _collect_activity_errors(lesson)
    if errors:
        raise ValidationError(
            f"{len(errors)} activity validation error(s)", errors=errors
        )

    saved = lesson.model_copy(update={"is_saved": True})
    await store.upsert(saved)
    logger.info("Lesson upserted: id=%s activities=%d", saved.id, len(saved.activities))
    return saved
