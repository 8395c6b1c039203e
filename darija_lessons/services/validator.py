"""
Activity Validation — the save gate for activity drafts.

Validates an activity draft before it is added to (or updated in) a lesson.
Every rule runs; errors are collected in rule order, never short-circuited.
Pure: the draft is not modified and nothing is raised.
"""

import logging
from typing import Callable

from darija_lessons.schemas.activity import (
    Activity,
    DialogueActivity,
    FillInBlanksActivity,
    MatchImageActivity,
    MultipleChoiceActivity,
    OrderingActivity,
)
from darija_lessons.services.tokenizer import has_blanks

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Messages and minimum collection sizes
# ---------------------------------------------------------------------------

TITLE_REQUIRED = "Activity title is required"
QUESTION_REQUIRED = "Question text is required"
OPTIONS_REQUIRED = "At least 2 options are required"
CORRECT_OPTION_REQUIRED = "One option must be marked as correct"
ITEMS_REQUIRED = "At least 2 items are required"
PAIRS_REQUIRED = "At least 2 pairs are required"
BLANKS_REQUIRED = "Sentence must contain blanks marked with {word}"

MIN_OPTIONS = 2
MIN_ITEMS = 2
MIN_PAIRS = 2


# ---------------------------------------------------------------------------
# ActivityValidator
# ---------------------------------------------------------------------------

class ActivityValidator:
    """
    Validates an activity draft against the per-type save policy.

    Checks, in order:
      a) title_check
      b) question_check
      c) type_check  (dispatches on the activity variant)
    """

    def validate(self, activity: Activity) -> list[str]:
        """Return the list of validation errors; empty means valid."""
        checks: list[Callable[[Activity], list[str]]] = [
            self.title_check,
            self.question_check,
            self.type_check,
        ]
        errors: list[str] = []
        for check in checks:
            errors.extend(check(activity))

        if errors:
            logger.debug(
                "Activity id=%s type=%s failed validation: %s",
                activity.id,
                activity.type,
                errors,
            )
        return errors

    # ------------------------------------------------------------------
    # Common checks
    # ------------------------------------------------------------------

    def title_check(self, activity: Activity) -> list[str]:
        if not activity.title.strip():
            return [TITLE_REQUIRED]
        return []

    def question_check(self, activity: Activity) -> list[str]:
        if not activity.question.text.strip():
            return [QUESTION_REQUIRED]
        return []

    # ------------------------------------------------------------------
    # Type-specific checks
    # ------------------------------------------------------------------

    def type_check(self, activity: Activity) -> list[str]:
        if isinstance(activity, MultipleChoiceActivity):
            return self.multiple_choice_check(activity)
        if isinstance(activity, (OrderingActivity, DialogueActivity)):
            return self.items_check(activity)
        if isinstance(activity, MatchImageActivity):
            return self.pairs_check(activity)
        if isinstance(activity, FillInBlanksActivity):
            return self.blanks_check(activity)
        return []

    def multiple_choice_check(self, activity: MultipleChoiceActivity) -> list[str]:
        """
        At least two options with text.
        At least one option flagged correct.
        """
        errors: list[str] = []
        filled = [opt for opt in activity.options if opt.text.strip()]
        if len(filled) < MIN_OPTIONS:
            errors.append(OPTIONS_REQUIRED)
        if not any(opt.is_correct for opt in activity.options):
            errors.append(CORRECT_OPTION_REQUIRED)
        return errors

    def items_check(self, activity: OrderingActivity | DialogueActivity) -> list[str]:
        if len(activity.items) < MIN_ITEMS:
            return [ITEMS_REQUIRED]
        return []

    def pairs_check(self, activity: MatchImageActivity) -> list[str]:
        if len(activity.pairs) < MIN_PAIRS:
            return [PAIRS_REQUIRED]
        return []

    def blanks_check(self, activity: FillInBlanksActivity) -> list[str]:
        """The sentence template must contain at least one ``{word}`` blank."""
        if not has_blanks(activity.question.text):
            return [BLANKS_REQUIRED]
        return []


_validator = ActivityValidator()


def validate_activity(activity: Activity) -> list[str]:
    """Validate *activity* with the shared :class:`ActivityValidator`."""
    return _validator.validate(activity)
