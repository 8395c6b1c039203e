"""
Learner quiz endpoints.

POST /quiz starts a session for a stored lesson and DELETE /quiz/{id} ends
it. The remaining endpoints drive its
:class:`~darija_lessons.services.quiz.QuizStepController`. Refused transitions
are not errors: the response is the unchanged session snapshot.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from darija_lessons.api.dependencies import LessonStoreDep, QuizSessionsDep
from darija_lessons.exceptions import LessonNotFoundError
from darija_lessons.schemas.quiz import (
    QuizSessionResponse,
    SelectAnswerRequest,
    StartQuizRequest,
    TapBlankRequest,
    TapWordRequest,
)
from darija_lessons.services.quiz import QuizStepController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["quiz"])


def _snapshot(session_id: str, lesson_id: str, quiz: QuizStepController) -> QuizSessionResponse:
    return QuizSessionResponse(
        session_id=session_id,
        lesson_id=lesson_id,
        total_steps=quiz.total_steps,
        progress=quiz.progress,
        can_check=quiz.can_check,
        completed=quiz.is_complete,
        state=quiz.state,
        sentence_template=quiz.sentence_template,
        available_words=quiz.available_words,
        feedback=quiz.feedback,
        summary=quiz.summary() if quiz.is_complete else None,
    )


@router.post(
    "",
    response_model=QuizSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a quiz for a stored lesson",
    responses={404: {"description": "Lesson not found"}},
)
async def start_quiz(
    payload: StartQuizRequest, store: LessonStoreDep, sessions: QuizSessionsDep
) -> QuizSessionResponse:
    lesson = await store.get(payload.lesson_id)
    if lesson is None:
        raise LessonNotFoundError(payload.lesson_id)
    session_id, quiz = sessions.create(lesson, seed=payload.seed)
    return _snapshot(session_id, lesson.id, quiz)


@router.get("/{session_id}", response_model=QuizSessionResponse, summary="Get quiz state")
async def get_quiz(session_id: str, sessions: QuizSessionsDep) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    return _snapshot(session_id, lesson_id, quiz)


@router.post("/{session_id}/select", response_model=QuizSessionResponse)
async def select_answer(
    session_id: str, payload: SelectAnswerRequest, sessions: QuizSessionsDep
) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    quiz.select_answer(payload.value)
    return _snapshot(session_id, lesson_id, quiz)


@router.post("/{session_id}/tap-word", response_model=QuizSessionResponse)
async def tap_word(
    session_id: str, payload: TapWordRequest, sessions: QuizSessionsDep
) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    quiz.tap_word(payload.word)
    return _snapshot(session_id, lesson_id, quiz)


@router.post("/{session_id}/tap-blank", response_model=QuizSessionResponse)
async def tap_blank(
    session_id: str, payload: TapBlankRequest, sessions: QuizSessionsDep
) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    quiz.tap_blank(payload.index)
    return _snapshot(session_id, lesson_id, quiz)


@router.post("/{session_id}/check", response_model=QuizSessionResponse)
async def check(session_id: str, sessions: QuizSessionsDep) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    quiz.check()
    return _snapshot(session_id, lesson_id, quiz)


@router.post("/{session_id}/continue", response_model=QuizSessionResponse)
async def continue_quiz(session_id: str, sessions: QuizSessionsDep) -> QuizSessionResponse:
    lesson_id, quiz = sessions.get(session_id)
    quiz.advance()
    return _snapshot(session_id, lesson_id, quiz)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End a quiz session",
    responses={404: {"description": "Quiz session not found"}},
)
async def end_quiz(session_id: str, sessions: QuizSessionsDep) -> None:
    sessions.discard(session_id)
