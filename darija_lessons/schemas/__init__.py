"""Pydantic v2 document and request/response schemas for the Darija Lessons API."""

from darija_lessons.schemas.activity import (
    ACTIVITY_TYPES,
    Activity,
    AudioFile,
    DialogueActivity,
    FillInBlanksActivity,
    MatchImageActivity,
    MediaElement,
    MultipleChoiceActivity,
    Option,
    OrderingActivity,
    Pair,
    parse_activity,
)
from darija_lessons.schemas.lesson import HealthResponse, Lesson, LessonListResponse
from darija_lessons.schemas.quiz import (
    QuizSessionResponse,
    QuizState,
    QuizSummary,
    SelectAnswerRequest,
    StartQuizRequest,
    StepResult,
    TapBlankRequest,
    TapWordRequest,
)
from darija_lessons.schemas.template import (
    BlankToken,
    SentenceToken,
    TextToken,
    TokenizedTemplate,
    TokenizeRequest,
)
from darija_lessons.schemas.validation import ActivityValidationResponse

__all__ = [
    "ACTIVITY_TYPES",
    "Activity",
    "AudioFile",
    "MediaElement",
    "Option",
    "Pair",
    "MultipleChoiceActivity",
    "FillInBlanksActivity",
    "OrderingActivity",
    "DialogueActivity",
    "MatchImageActivity",
    "parse_activity",
    "Lesson",
    "LessonListResponse",
    "HealthResponse",
    "QuizState",
    "StepResult",
    "QuizSummary",
    "StartQuizRequest",
    "SelectAnswerRequest",
    "TapWordRequest",
    "TapBlankRequest",
    "QuizSessionResponse",
    "TextToken",
    "BlankToken",
    "SentenceToken",
    "TokenizedTemplate",
    "TokenizeRequest",
    "ActivityValidationResponse",
]
