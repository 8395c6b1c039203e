"""FastAPI dependency injection helpers.

Provides reusable ``Depends``-compatible callables for:
- ``get_settings()``      → application settings
- ``get_lesson_store()``  → lesson store (stored on app.state)
- ``get_quiz_sessions()`` → learner quiz session registry (stored on app.state)
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from darija_lessons.config import Settings
from darija_lessons.config import get_settings as _get_settings_impl
from darija_lessons.services.lesson_store import LessonStore
from darija_lessons.services.quiz import QuizSessionRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    """Return the cached application settings."""
    return _get_settings_impl()


SettingsDep = Annotated[Settings, Depends(get_settings)]


# ---------------------------------------------------------------------------
# Lesson store (created during lifespan startup)
# ---------------------------------------------------------------------------


def get_lesson_store(request: Request) -> LessonStore:
    """Return the application-wide lesson store from ``app.state``.

    Raises:
        HTTPException: 503 if the store was not initialised.
    """
    store: LessonStore | None = getattr(request.app.state, "lesson_store", None)
    if store is None:
        logger.error("Lesson store not initialised — app.state.lesson_store is None")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lesson store is not available. Check server logs for startup errors.",
        )
    return store


LessonStoreDep = Annotated[LessonStore, Depends(get_lesson_store)]


# ---------------------------------------------------------------------------
# Quiz sessions
# ---------------------------------------------------------------------------


def get_quiz_sessions(request: Request) -> QuizSessionRegistry:
    """Return the quiz session registry, creating it on first use."""
    registry: QuizSessionRegistry | None = getattr(request.app.state, "quiz_sessions", None)
    if registry is None:
        registry = QuizSessionRegistry(max_sessions=_get_settings_impl().quiz_max_sessions)
        request.app.state.quiz_sessions = registry
    return registry


QuizSessionsDep = Annotated[QuizSessionRegistry, Depends(get_quiz_sessions)]
