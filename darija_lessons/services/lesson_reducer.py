"""Lesson authoring reducer.

``lesson_reducer(lesson, action)`` is a pure state transition over the Lesson
document. It never validates activities; validation happens before an
``AddActivity`` or ``UpdateActivity`` is dispatched (see
:mod:`darija_lessons.services.authoring`).

View graph (``SetView``)::

    list <-> setup <-> builder

``ResetLesson`` and ``LoadLesson`` enter ``setup`` from anywhere. Every
transition except ``SetView`` stamps ``updated_at``. A ``SetField`` value the
Lesson schema rejects, and an update or delete of an unknown activity id, are
refused: the same lesson object is returned.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Sequence, Union

from pydantic import ValidationError

from darija_lessons.schemas.activity import Activity
from darija_lessons.schemas.lesson import Lesson
from darija_lessons.services import ids

logger = logging.getLogger(__name__)

# Wire name or attribute name -> attribute name.
LESSON_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "level": "level",
    "objectives": "objectives",
    "introParts": "intro_parts",
    "intro_parts": "intro_parts",
    "tags": "tags",
    "isSaved": "is_saved",
    "is_saved": "is_saved",
    "isPublished": "is_published",
    "is_published": "is_published",
}

VIEW_TRANSITIONS: dict[str, frozenset[str]] = {
    "list": frozenset({"setup"}),
    "setup": frozenset({"list", "builder"}),
    "builder": frozenset({"setup"}),
}


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetField:
    type: ClassVar[str] = "SET_FIELD"
    field: str
    value: Any


@dataclass(frozen=True)
class AddActivity:
    type: ClassVar[str] = "ADD_ACTIVITY"
    activity: Activity


@dataclass(frozen=True)
class UpdateActivity:
    type: ClassVar[str] = "UPDATE_ACTIVITY"
    id: str
    activity: Activity


@dataclass(frozen=True)
class DeleteActivity:
    type: ClassVar[str] = "DELETE_ACTIVITY"
    id: str


@dataclass(frozen=True)
class ReorderActivities:
    type: ClassVar[str] = "REORDER_ACTIVITIES"
    activities: Sequence[Activity]


@dataclass(frozen=True)
class SetView:
    type: ClassVar[str] = "SET_VIEW"
    view: str


@dataclass(frozen=True)
class ResetLesson:
    type: ClassVar[str] = "RESET_LESSON"


@dataclass(frozen=True)
class LoadLesson:
    type: ClassVar[str] = "LOAD_LESSON"
    lesson: Lesson


LessonAction = Union[
    SetField,
    AddActivity,
    UpdateActivity,
    DeleteActivity,
    ReorderActivities,
    SetView,
    ResetLesson,
    LoadLesson,
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _stamp(previous: datetime) -> datetime:
    """Current time, never earlier than *previous*."""
    return max(ids.utcnow(), _aware(previous))


def _touch(lesson: Lesson, **update: Any) -> Lesson:
    update["updated_at"] = _stamp(lesson.updated_at)
    return lesson.with_changes(**update)


def new_lesson() -> Lesson:
    """Return a fresh lesson in the ``setup`` view."""
    now = ids.utcnow()
    return Lesson(current_view="setup", created_at=now, updated_at=now)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def lesson_reducer(lesson: Lesson, action: LessonAction) -> Lesson:
    """Apply *action* to *lesson* and return the next lesson state."""
    if isinstance(action, SetField):
        attr = LESSON_FIELDS.get(action.field)
        if attr is None:
            logger.warning("SET_FIELD ignored: unknown lesson field %r", action.field)
            return lesson
        try:
            return _touch(lesson, **{attr: action.value})
        except ValidationError as exc:
            logger.debug(
                "SET_FIELD refused: invalid %s (%d errors)", attr, exc.error_count()
            )
            return lesson

    if isinstance(action, AddActivity):
        activity = action.activity.model_copy(update={"id": ids.new_id()})
        return _touch(lesson, activities=[*lesson.activities, activity])

    if isinstance(action, (UpdateActivity, DeleteActivity)) and not any(
        act.id == action.id for act in lesson.activities
    ):
        logger.debug("%s refused: no activity id=%s", action.type, action.id)
        return lesson

    if isinstance(action, UpdateActivity):
        activities = [
            action.activity.model_copy(update={"id": act.id}) if act.id == action.id else act
            for act in lesson.activities
        ]
        return _touch(lesson, activities=activities)

    if isinstance(action, DeleteActivity):
        activities = [act for act in lesson.activities if act.id != action.id]
        return _touch(lesson, activities=activities)

    if isinstance(action, ReorderActivities):
        return _touch(lesson, activities=list(action.activities))

    if isinstance(action, SetView):
        if action.view not in VIEW_TRANSITIONS.get(lesson.current_view, frozenset()):
            logger.debug(
                "SET_VIEW refused: %s -> %s", lesson.current_view, action.view
            )
            return lesson
        return lesson.model_copy(update={"current_view": action.view})

    if isinstance(action, ResetLesson):
        return new_lesson()

    if isinstance(action, LoadLesson):
        return _touch(action.lesson, current_view="setup")

    logger.warning("Unknown lesson action ignored: %r", action)
    return lesson
