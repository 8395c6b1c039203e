"""Pydantic v2 schemas for learner quiz state and quiz API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from darija_lessons.schemas.template import SentenceToken


class QuizState(BaseModel):
    """Learner progress within a lesson.

    Attributes:
        step: 0 is the intro; ``1..N`` are activities; ``N + 1`` is complete.
        is_answered: Whether the current step has been checked.
        is_correct: Result of the last check.
        selected_answer: Tentative choice (option text or pair id).
        blanks_state: Blank index -> assigned word, for fill-in-blanks.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    step: int = Field(default=0, ge=0)
    is_answered: bool = False
    is_correct: bool = False
    selected_answer: str | None = None
    blanks_state: dict[int, str] = Field(default_factory=dict)


class StepResult(BaseModel):
    """Outcome of one checked activity step."""

    model_config = ConfigDict(strict=False, populate_by_name=True)

    step: int
    activity_id: str
    activity_type: str
    is_correct: bool


class QuizSummary(BaseModel):
    """Completion summary shown after the last step.

    Attributes:
        total_activities: Number of activities in the lesson.
        correct_count: Activities answered correctly.
        score: ``correct_count / total_activities`` as a 0-100 integer.
        results: Per-step results in step order.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    total_activities: int
    correct_count: int
    score: int = Field(..., ge=0, le=100)
    results: list[StepResult] = Field(default_factory=list)


class StartQuizRequest(BaseModel):
    """Request payload for POST /quiz."""

    model_config = ConfigDict(strict=False, populate_by_name=True)

    lesson_id: str = Field(..., min_length=1, description="Stored lesson to play")
    seed: int | None = Field(default=None, description="Shuffle seed (for replay)")


class SelectAnswerRequest(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    value: str


class TapWordRequest(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    word: str


class TapBlankRequest(BaseModel):
    model_config = ConfigDict(strict=False, populate_by_name=True)

    index: int = Field(..., ge=0)


class QuizSessionResponse(BaseModel):
    """Snapshot of a learner quiz session.

    Attributes:
        session_id: Quiz session identifier.
        lesson_id: Lesson being played.
        total_steps: Intro plus one step per activity.
        progress: Percentage of steps completed.
        can_check: Whether ``check`` would be accepted now.
        completed: Whether the terminal state has been reached.
        state: Current quiz state.
        sentence_template: Tokens for a fill-in-blanks step.
        available_words: Word tiles still in the pool.
        feedback: Feedback message once the step is checked.
        summary: Completion summary once completed.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    session_id: str
    lesson_id: str
    total_steps: int
    progress: int
    can_check: bool
    completed: bool
    state: QuizState
    sentence_template: list[SentenceToken] = Field(default_factory=list)
    available_words: list[str] = Field(default_factory=list)
    feedback: str | None = None
    summary: QuizSummary | None = None
