"""Quiz step controller: walks a learner through a lesson.

Step 0 is the intro (objectives and instructional text); steps ``1..N``
render the lesson's activities in order; step ``N + 1`` is the terminal
completion state. Each step is answered with :meth:`QuizStepController.check`
and left with :meth:`QuizStepController.advance`.

Illegal transitions (advancing before checking, selecting after checking,
checking an incomplete fill-in-blanks step, anything after completion) are
refused: the method returns ``False`` and the state is unchanged.

Dialogue, ordering and match-image steps gate pacing only: checking them is
always correct.
"""

import logging
import random
from collections import OrderedDict

from darija_lessons.exceptions import QuizSessionNotFoundError
from darija_lessons.schemas.activity import (
    Activity,
    FillInBlanksActivity,
    MatchImageActivity,
    MultipleChoiceActivity,
)
from darija_lessons.schemas.lesson import Lesson
from darija_lessons.schemas.quiz import QuizState, QuizSummary, StepResult
from darija_lessons.schemas.template import SentenceToken
from darija_lessons.services.blank_slots import BlankSlotEngine
from darija_lessons.services.ids import new_id

logger = logging.getLogger(__name__)

INCORRECT_FEEDBACK = "Review the rule and try again."
DEFAULT_MAX_SESSIONS = 1000


class QuizStepController:
    """Learner progress state machine for one lesson.

    Args:
        lesson: The lesson to play.
        rng: Random source for word-pool shuffling.
    """

    def __init__(self, lesson: Lesson, rng: random.Random | None = None) -> None:
        self.lesson = lesson
        self._rng = rng or random.Random()
        self.step = 0
        self.is_answered = False
        self.is_correct = False
        self.selected_answer: str | None = None
        self.blanks: BlankSlotEngine | None = None
        self.results: list[StepResult] = []

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return 1 + len(self.lesson.activities)

    @property
    def is_complete(self) -> bool:
        return self.step >= self.total_steps

    @property
    def current_activity(self) -> Activity | None:
        """The activity for the current step; ``None`` on intro or completion."""
        if self.step == 0 or self.is_complete:
            return None
        return self.lesson.activities[self.step - 1]

    @property
    def progress(self) -> int:
        return round(self.step / self.total_steps * 100)

    @property
    def state(self) -> QuizState:
        return QuizState(
            step=self.step,
            is_answered=self.is_answered,
            is_correct=self.is_correct,
            selected_answer=self.selected_answer,
            blanks_state=dict(self.blanks.blanks_state) if self.blanks else {},
        )

    @property
    def sentence_template(self) -> list[SentenceToken]:
        return list(self.blanks.template.sentence_template) if self.blanks else []

    @property
    def available_words(self) -> list[str]:
        return list(self.blanks.available_words) if self.blanks else []

    @property
    def can_check(self) -> bool:
        if self.is_answered or self.is_complete:
            return False
        activity = self.current_activity
        if activity is None:
            return True
        if isinstance(activity, (MultipleChoiceActivity, MatchImageActivity)):
            return self.selected_answer is not None
        if isinstance(activity, FillInBlanksActivity):
            return self.blanks is not None and self.blanks.all_blanks_filled
        return True

    @property
    def feedback(self) -> str | None:
        """Message for the checked step (activity feedback when correct)."""
        if not self.is_answered:
            return None
        if not self.is_correct:
            return INCORRECT_FEEDBACK
        activity = self.current_activity
        return activity.feedback if activity is not None else None

    # ------------------------------------------------------------------
    # Learner actions
    # ------------------------------------------------------------------

    def select_answer(self, value: str) -> bool:
        """Record a tentative choice (option text or pair id)."""
        if self.is_answered or self.current_activity is None:
            return False
        self.selected_answer = value
        return True

    def tap_word(self, word: str) -> bool:
        if self.is_answered or self.blanks is None:
            return False
        return self.blanks.tap_word(word)

    def tap_blank(self, index: int) -> bool:
        if self.is_answered or self.blanks is None:
            return False
        return self.blanks.tap_blank(index)

    def check(self) -> bool:
        """Evaluate the current step; return False if the check was refused."""
        if not self.can_check:
            logger.debug("check refused at step %d", self.step)
            return False

        activity = self.current_activity
        self.is_correct = self._evaluate(activity)
        self.is_answered = True
        if self.blanks is not None:
            self.blanks.lock()
        if activity is not None:
            self.results.append(
                StepResult(
                    step=self.step,
                    activity_id=activity.id,
                    activity_type=activity.type,
                    is_correct=self.is_correct,
                )
            )
        return True

    def advance(self) -> bool:
        """Move to the next step; only legal once the current step is checked."""
        if not self.is_answered or self.is_complete:
            logger.debug("advance refused at step %d", self.step)
            return False

        self.step += 1
        self.is_answered = False
        self.is_correct = False
        self.selected_answer = None
        activity = self.current_activity
        if isinstance(activity, FillInBlanksActivity):
            self.blanks = BlankSlotEngine.for_activity(activity, self._rng)
        else:
            self.blanks = None
        return True

    def summary(self) -> QuizSummary:
        total = len(self.lesson.activities)
        correct = sum(1 for r in self.results if r.is_correct)
        return QuizSummary(
            total_activities=total,
            correct_count=correct,
            score=round(correct / total * 100) if total else 100,
            results=list(self.results),
        )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _evaluate(self, activity: Activity | None) -> bool:
        if activity is None:
            return True
        if isinstance(activity, MultipleChoiceActivity):
            chosen = next(
                (opt for opt in activity.options if opt.text == self.selected_answer), None
            )
            return chosen is not None and chosen.is_correct
        if isinstance(activity, FillInBlanksActivity):
            return self.blanks is not None and self.blanks.is_correct()
        # dialogue, ordering, match-image
        return True


# ---------------------------------------------------------------------------
# Session registry (used by the HTTP API)
# ---------------------------------------------------------------------------


class QuizSessionRegistry:
    """Process-local map of quiz session id -> controller.

    Holds at most ``max_sessions`` sessions. Starting one more evicts the
    session that was used least recently; :meth:`discard` ends one explicitly.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, tuple[str, QuizStepController]] = OrderedDict()

    def create(self, lesson: Lesson, seed: int | None = None) -> tuple[str, QuizStepController]:
        session_id = new_id()
        rng = random.Random(seed) if seed is not None else None
        controller = QuizStepController(lesson, rng=rng)
        self._sessions[session_id] = (lesson.id, controller)
        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Quiz session %s evicted (limit %d)", evicted, self._max_sessions)
        logger.info("Quiz session %s started for lesson id=%s", session_id, lesson.id)
        return session_id, controller

    def get(self, session_id: str) -> tuple[str, QuizStepController]:
        """Return ``(lesson_id, controller)`` and mark the session as recently used.

        Raises:
            QuizSessionNotFoundError: If *session_id* is unknown.
        """
        try:
            entry = self._sessions[session_id]
        except KeyError:
            raise QuizSessionNotFoundError(session_id) from None
        self._sessions.move_to_end(session_id)
        return entry

    def discard(self, session_id: str) -> None:
        """End a session.

        Raises:
            QuizSessionNotFoundError: If *session_id* is unknown.
        """
        if self._sessions.pop(session_id, None) is None:
            raise QuizSessionNotFoundError(session_id)
        logger.info("Quiz session %s discarded", session_id)

    def __len__(self) -> int:
        return len(self._sessions)
