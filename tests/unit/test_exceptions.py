"""Unit tests for custom exception classes (darija_lessons/exceptions.py).

Tests verify that each exception class:
1. Stores its constructor arguments as instance attributes.
2. Inherits from the standard Exception hierarchy.
3. Has a useful string representation that includes the message.

No database or external services are used.
"""

from __future__ import annotations

import pytest

from darija_lessons.exceptions import (
    AudioUploadError,
    DatabaseConnectionError,
    LessonNotFoundError,
    QuizSessionNotFoundError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# ValidationError
# ---------------------------------------------------------------------------


def test_validation_error_stores_errors():
    """ValidationError keeps the per-activity messages for the 422 response."""
    exc = ValidationError(
        "1 activity validation error(s)",
        errors=["Activity 2: Question text is required"],
    )

    assert isinstance(exc, Exception), "ValidationError must inherit from Exception"
    assert str(exc) == "1 activity validation error(s)"
    assert exc.errors == ["Activity 2: Question text is required"], (
        f"errors not stored correctly: {exc.errors}"
    )


def test_validation_error_defaults_errors_to_empty_list():
    """Handlers iterate exc.errors; the default must be an empty list."""
    exc = ValidationError("invalid")

    assert exc.errors == []


# ---------------------------------------------------------------------------
# Not-found errors
# ---------------------------------------------------------------------------


def test_lesson_not_found_error_stores_lesson_id():
    exc = LessonNotFoundError("lesson-42")

    assert exc.lesson_id == "lesson-42"
    assert "lesson-42" in str(exc), f"Message must mention the id, got {str(exc)!r}"


def test_quiz_session_not_found_error_stores_session_id():
    exc = QuizSessionNotFoundError("abc123")

    assert exc.session_id == "abc123"
    assert "abc123" in str(exc)


# ---------------------------------------------------------------------------
# AudioUploadError
# ---------------------------------------------------------------------------


def test_audio_upload_error_stores_file_name():
    exc = AudioUploadError("Upload rejected", file_name="salam.mp3")

    assert str(exc) == "Upload rejected"
    assert exc.file_name == "salam.mp3"


def test_audio_upload_error_file_name_defaults_to_none():
    assert AudioUploadError("Audio file has no name").file_name is None


# ---------------------------------------------------------------------------
# DatabaseConnectionError
# ---------------------------------------------------------------------------


def test_database_connection_error_stores_message():
    exc = DatabaseConnectionError("connection refused")

    assert str(exc) == "connection refused"


def test_exceptions_can_be_raised_and_caught():
    """All domain exceptions are ordinary Exceptions usable in except blocks."""
    with pytest.raises(LessonNotFoundError) as info:
        raise LessonNotFoundError("missing")

    assert info.value.lesson_id == "missing"
