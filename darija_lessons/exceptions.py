"""Custom exception classes for the Darija Lessons service.

Domain-level errors are raised as one of these typed exceptions so that
FastAPI exception handlers can convert them to structured HTTP responses.
Illegal state-machine transitions are not exceptions: they are refused as
no-ops by the reducers and controllers.
"""


class ValidationError(Exception):
    """Raised when an activity (or a lesson containing it) cannot be saved.

    Args:
        message: Summary of the failure.
        errors: Human-readable reasons, in validation rule order.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = errors or []


class LessonNotFoundError(Exception):
    """Raised when a lesson id is not present in the lesson store.

    Args:
        lesson_id: The identifier that was not found.
    """

    def __init__(self, lesson_id: str) -> None:
        super().__init__(f"Lesson with id={lesson_id} not found")
        self.lesson_id: str = lesson_id


class QuizSessionNotFoundError(Exception):
    """Raised when a learner quiz session id is unknown or expired.

    Args:
        session_id: The identifier that was not found.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Quiz session with id={session_id} not found")
        self.session_id: str = session_id


class AudioUploadError(Exception):
    """Raised by the audio attachment service when a file cannot be stored.

    Args:
        message: Description of the failure.
        file_name: Name of the offending file, when known.
    """

    def __init__(self, message: str, file_name: str | None = None) -> None:
        super().__init__(message)
        self.file_name: str | None = file_name


class DatabaseConnectionError(Exception):
    """Raised when the lesson database cannot be reached.

    Args:
        message: Detail from the underlying driver exception.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
