"""Activity draft editor.

Every function takes a draft and returns a new one; the input draft is never
modified, so an author can always discard the edit session. Operations that
do not apply to the draft (adding an option to a dialogue, removing an item
below the minimum, an out-of-range index) return the draft unchanged.
"""

import logging
from typing import Any, Literal

from pydantic import ValidationError

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
)

logger = logging.getLogger(__name__)

MediaTarget = Literal["question", "options", "items", "pairs"]

_VARIANTS: dict[str, type] = {
    "multiple-choice": MultipleChoiceActivity,
    "fill-in-blanks": FillInBlanksActivity,
    "ordering": OrderingActivity,
    "dialogue": DialogueActivity,
    "match-image": MatchImageActivity,
}

EDITABLE_FIELDS = frozenset(
    {"title", "description", "difficulty", "time_estimate", "feedback"}
)
MEDIA_KEYS = frozenset({"text", "translation", "image"})

# Removal never drops a collection below these sizes.
MIN_OPTIONS = 2
MIN_ITEMS = 1
MIN_PAIRS = 2


# ---------------------------------------------------------------------------
# Default shapes
# ---------------------------------------------------------------------------


def new_media_element() -> MediaElement:
    return MediaElement()


def new_option(is_correct: bool = False) -> Option:
    return Option(is_correct=is_correct)


def new_pair() -> Pair:
    return Pair()


def new_activity_draft(activity_type: str = "multiple-choice", **fields: Any) -> Activity:
    """Return a draft with the default shape for *activity_type*.

    Args:
        activity_type: One of the five activity types.
        **fields: Common fields to set (``id``, ``title``, ...).

    Raises:
        ValueError: If *activity_type* is unknown.
    """
    try:
        variant = _VARIANTS[activity_type]
    except KeyError:
        raise ValueError(f"Unknown activity type: {activity_type!r}") from None

    if variant is MultipleChoiceActivity:
        fields.setdefault(
            "options", [new_option(is_correct=True), new_option(), new_option()]
        )
    elif variant in (OrderingActivity, DialogueActivity):
        fields.setdefault("items", [new_media_element()])
    elif variant is MatchImageActivity:
        fields.setdefault("pairs", [new_pair()])
    return variant(**fields)


# ---------------------------------------------------------------------------
# Scalar and media fields
# ---------------------------------------------------------------------------


def set_field(draft: Activity, field: str, value: Any) -> Activity:
    """Set a top-level scalar field (title, difficulty, time_estimate, ...)."""
    if field not in EDITABLE_FIELDS:
        logger.debug("Refusing edit of non-editable activity field %r", field)
        return draft
    if field == "time_estimate":
        try:
            value = int(value)
        except (TypeError, ValueError):
            logger.debug("Refusing non-numeric time estimate %r", value)
            return draft
    try:
        return draft.with_changes(**{field: value})
    except ValidationError:
        logger.debug("Refusing invalid value %r for %s", value, field)
        return draft


def _update_element(
    draft: Activity, target: str, index: int | None, **changes: Any
) -> Activity:
    if target == "question":
        try:
            return draft.with_changes(question=draft.question.with_changes(**changes))
        except ValidationError:
            logger.debug("Refusing invalid question edit %r", changes)
            return draft
    if target not in ("options", "items", "pairs") or not hasattr(draft, target):
        logger.debug("Activity type %s has no %r collection", draft.type, target)
        return draft

    elements = list(getattr(draft, target))
    if index is None or not 0 <= index < len(elements):
        logger.debug("Index %r out of range for %s", index, target)
        return draft
    try:
        elements[index] = elements[index].with_changes(**changes)
    except ValidationError:
        logger.debug("Refusing invalid %s[%d] edit %r", target, index, changes)
        return draft
    return draft.with_changes(**{target: elements})


def set_media_field(
    draft: Activity,
    target: MediaTarget,
    key: str,
    value: str,
    index: int | None = None,
) -> Activity:
    """Edit ``text``/``translation``/``image`` on the question or a list element.

    Args:
        draft: The activity draft.
        target: ``question`` or one of ``options``, ``items``, ``pairs``.
        key: Media field name; ``image`` only applies to pairs.
        value: New value.
        index: Element index for list targets.
    """
    if key not in MEDIA_KEYS or (key == "image" and target != "pairs"):
        logger.debug("Refusing media edit of %r on %s", key, target)
        return draft
    return _update_element(draft, target, index, **{key: value})


def set_audio_file(
    draft: Activity,
    target: MediaTarget,
    audio: AudioFile,
    index: int | None = None,
) -> Activity:
    """Store an uploaded audio descriptor on the target element."""
    return _update_element(draft, target, index, audio_ref=audio, audio_url=audio.url)


def set_word_blocks(draft: Activity, text: str) -> Activity:
    """Set fill-in-blanks word blocks from comma-separated input."""
    if not isinstance(draft, FillInBlanksActivity):
        return draft
    words = [w.strip() for w in text.split(",") if w.strip()]
    return draft.model_copy(update={"word_blocks": words})


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def add_option(draft: Activity) -> Activity:
    if not isinstance(draft, MultipleChoiceActivity):
        return draft
    return draft.model_copy(update={"options": [*draft.options, new_option()]})


def add_item(draft: Activity) -> Activity:
    if not isinstance(draft, (OrderingActivity, DialogueActivity)):
        return draft
    return draft.model_copy(update={"items": [*draft.items, new_media_element()]})


def add_pair(draft: Activity) -> Activity:
    if not isinstance(draft, MatchImageActivity):
        return draft
    return draft.model_copy(update={"pairs": [*draft.pairs, new_pair()]})


def _remove(draft: Activity, target: str, index: int, minimum: int) -> Activity:
    elements = getattr(draft, target)
    if len(elements) <= minimum or not 0 <= index < len(elements):
        logger.debug(
            "Refusing removal of %s[%d]: %d left, minimum %d",
            target,
            index,
            len(elements),
            minimum,
        )
        return draft
    return draft.model_copy(
        update={target: [e for i, e in enumerate(elements) if i != index]}
    )


def remove_option(draft: Activity, index: int) -> Activity:
    if not isinstance(draft, MultipleChoiceActivity):
        return draft
    return _remove(draft, "options", index, MIN_OPTIONS)


def remove_item(draft: Activity, index: int) -> Activity:
    if not isinstance(draft, (OrderingActivity, DialogueActivity)):
        return draft
    return _remove(draft, "items", index, MIN_ITEMS)


def remove_pair(draft: Activity, index: int) -> Activity:
    if not isinstance(draft, MatchImageActivity):
        return draft
    return _remove(draft, "pairs", index, MIN_PAIRS)


def set_correct_option(draft: Activity, index: int) -> Activity:
    """Mark option *index* correct and every other option incorrect."""
    if not isinstance(draft, MultipleChoiceActivity):
        return draft
    if not 0 <= index < len(draft.options):
        return draft
    options = [
        opt.model_copy(update={"is_correct": i == index})
        for i, opt in enumerate(draft.options)
    ]
    return draft.model_copy(update={"options": options})


# ---------------------------------------------------------------------------
# Type change
# ---------------------------------------------------------------------------


def change_type(draft: Activity, new_type: str) -> Activity:
    """Reset *draft* to the default shape of *new_type*.

    Only ``id`` and a non-empty ``title`` survive; an empty title becomes
    ``"New <type> activity"``.
    """
    if new_type not in ACTIVITY_TYPES:
        logger.debug("Refusing change to unknown activity type %r", new_type)
        return draft
    title = draft.title or f"New {new_type.replace('-', ' ')} activity"
    return new_activity_draft(new_type, id=draft.id, title=title)
