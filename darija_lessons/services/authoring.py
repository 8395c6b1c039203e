"""Authoring state machine: the lesson plus the in-progress activity draft.

The draft is a nested sub-state of the same machine as the lesson. It is
entered with :class:`StartDraft` (a new activity, or a copy of an existing
one), revised with :class:`ReviseDraft` (the result of an
:mod:`~darija_lessons.services.activity_editor` operation), and left with
:class:`SaveDraft` or :class:`CancelDraft`. Saving runs the validator; a
draft with errors stays open and the lesson is untouched.

``authoring_reducer`` is pure. :class:`AuthoringSession` is its caller: it
holds the current state, performs the persistence effect after every
committed lesson change, resolves audio uploads asynchronously and asks the
confirmation collaborator before deleting an activity.

Usage::

    session = AuthoringSession(store=InMemoryLessonStore())
    await session.create_lesson()
    await session.set_field("title", "Greetings")
    await session.go_to("builder")
    await session.start_new_activity()
    await session.edit_draft(activity_editor.set_field, "title", "Morning")
    errors = await session.save_activity()
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, ClassVar, Sequence, Union

from darija_lessons.exceptions import AudioUploadError, DatabaseConnectionError, LessonNotFoundError
from darija_lessons.schemas.activity import ACTIVITY_TYPES, Activity
from darija_lessons.schemas.lesson import Lesson
from darija_lessons.services.activity_editor import MediaTarget, new_activity_draft, set_audio_file
from darija_lessons.services.audio import AudioUploader, SimulatedAudioUploader
from darija_lessons.services.lesson_reducer import (
    AddActivity,
    DeleteActivity,
    LessonAction,
    LoadLesson,
    ReorderActivities,
    ResetLesson,
    SetField,
    SetView,
    UpdateActivity,
    lesson_reducer,
)
from darija_lessons.services.lesson_store import LessonStore
from darija_lessons.services.validator import validate_activity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Draft actions and state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StartDraft:
    """Open a draft: a new activity, or a copy of ``activity_id``.

    Either way the lesson moves to the ``builder`` view when the view graph
    allows it (from ``setup``).
    """

    type: ClassVar[str] = "START_DRAFT"
    activity_id: str | None = None
    activity_type: str = "multiple-choice"


@dataclass(frozen=True)
class ReviseDraft:
    type: ClassVar[str] = "REVISE_DRAFT"
    draft: Activity


@dataclass(frozen=True)
class SaveDraft:
    type: ClassVar[str] = "SAVE_DRAFT"


@dataclass(frozen=True)
class CancelDraft:
    type: ClassVar[str] = "CANCEL_DRAFT"


DraftAction = Union[StartDraft, ReviseDraft, SaveDraft, CancelDraft]
AuthoringAction = Union[LessonAction, DraftAction]


@dataclass(frozen=True)
class AuthoringState:
    """Lesson document plus the optional activity draft.

    Attributes:
        lesson: The lesson being authored.
        draft: The open activity draft, or ``None``.
        editing_id: Id of the lesson activity the draft will replace;
            ``None`` when the draft is a new activity.
        validation_errors: Errors from the last failed save.
    """

    lesson: Lesson
    draft: Activity | None = None
    editing_id: str | None = None
    validation_errors: tuple[str, ...] = ()

    @property
    def is_editing(self) -> bool:
        return self.draft is not None and self.editing_id is not None


def authoring_reducer(state: AuthoringState, action: AuthoringAction) -> AuthoringState:
    """Apply *action* and return the next authoring state."""
    if isinstance(action, StartDraft):
        if action.activity_id is None:
            if action.activity_type not in ACTIVITY_TYPES:
                logger.debug("START_DRAFT refused: unknown type %r", action.activity_type)
                return state
            return AuthoringState(
                lesson=lesson_reducer(state.lesson, SetView("builder")),
                draft=new_activity_draft(action.activity_type),
            )
        existing = next(
            (act for act in state.lesson.activities if act.id == action.activity_id), None
        )
        if existing is None:
            logger.debug("START_DRAFT refused: no activity id=%s", action.activity_id)
            return state
        return AuthoringState(
            lesson=lesson_reducer(state.lesson, SetView("builder")),
            draft=existing.model_copy(deep=True),
            editing_id=existing.id,
        )

    if isinstance(action, ReviseDraft):
        if state.draft is None:
            logger.debug("REVISE_DRAFT refused: no open draft")
            return state
        return replace(state, draft=action.draft)

    if isinstance(action, SaveDraft):
        if state.draft is None:
            return state
        errors = validate_activity(state.draft)
        if errors:
            return replace(state, validation_errors=tuple(errors))
        if state.editing_id is not None:
            lesson = lesson_reducer(
                state.lesson, UpdateActivity(id=state.editing_id, activity=state.draft)
            )
        else:
            lesson = lesson_reducer(state.lesson, AddActivity(activity=state.draft))
        return AuthoringState(lesson=lesson)

    if isinstance(action, CancelDraft):
        return AuthoringState(lesson=state.lesson)

    lesson = lesson_reducer(state.lesson, action)
    if isinstance(action, (ResetLesson, LoadLesson)):
        return AuthoringState(lesson=lesson)
    if lesson is state.lesson:
        return state
    return replace(state, lesson=lesson)


# ---------------------------------------------------------------------------
# Session (effects)
# ---------------------------------------------------------------------------


class AuthoringSession:
    """Drive the authoring state machine and perform its effects.

    Args:
        store: Lesson store; receives an upsert after every committed lesson
            change once the lesson has at least one activity.
        uploader: Audio attachment service.
        confirm_delete: Confirmation collaborator called with the activity id
            before it is deleted; deletion proceeds only if it returns True.
            ``None`` confirms every deletion.
        lesson: Initial lesson (defaults to an empty lesson in ``list`` view).
    """

    def __init__(
        self,
        store: LessonStore,
        uploader: AudioUploader | None = None,
        confirm_delete: Callable[[str], bool] | None = None,
        lesson: Lesson | None = None,
    ) -> None:
        self._store = store
        self._uploader = uploader or SimulatedAudioUploader()
        self._confirm_delete = confirm_delete
        self._state = AuthoringState(lesson=lesson or Lesson())
        self._draft_epoch = 0
        self._uploads: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> AuthoringState:
        return self._state

    @property
    def lesson(self) -> Lesson:
        return self._state.lesson

    @property
    def draft(self) -> Activity | None:
        return self._state.draft

    # ------------------------------------------------------------------
    # Dispatch + persistence effect
    # ------------------------------------------------------------------

    async def dispatch(self, action: AuthoringAction) -> AuthoringState:
        """Apply *action*, then persist the lesson if it changed."""
        previous = self._state
        self._state = authoring_reducer(previous, action)

        draft_reset = isinstance(action, (StartDraft, CancelDraft, ResetLesson, LoadLesson))
        if draft_reset or (previous.draft is not None and self._state.draft is None):
            self._draft_epoch += 1

        if self._state.lesson is not previous.lesson:
            logger.debug("Lesson id=%s changed by %s", self._state.lesson.id, action.type)
            await self._persist()
        return self._state

    async def _persist(self) -> None:
        lesson = self._state.lesson
        if not lesson.activities:
            return
        saved = lesson.model_copy(update={"is_saved": True})
        try:
            await self._store.upsert(saved)
        except DatabaseConnectionError as exc:
            logger.error("Lesson id=%s not saved: %s", lesson.id, exc)
            self._state = replace(
                self._state, lesson=lesson.model_copy(update={"is_saved": False})
            )
            return
        self._state = replace(self._state, lesson=saved)

    # ------------------------------------------------------------------
    # Lesson navigation and fields
    # ------------------------------------------------------------------

    async def list_lessons(self) -> list[Lesson]:
        return await self._store.load_all()

    async def create_lesson(self) -> Lesson:
        await self.dispatch(ResetLesson())
        return self.lesson

    async def load_lesson(self, lesson_id: str) -> Lesson:
        """Open a stored lesson for editing.

        Raises:
            LessonNotFoundError: If the store has no lesson with *lesson_id*.
        """
        stored = await self._store.get(lesson_id)
        if stored is None:
            raise LessonNotFoundError(lesson_id)
        await self.dispatch(LoadLesson(lesson=stored))
        return self.lesson

    async def go_to(self, view: str) -> Lesson:
        await self.dispatch(SetView(view))
        return self.lesson

    async def set_field(self, field: str, value: Any) -> Lesson:
        await self.dispatch(SetField(field, value))
        return self.lesson

    async def add_objective(self) -> Lesson:
        return await self.set_field("objectives", [*self.lesson.objectives, ""])

    async def update_objective(self, index: int, text: str) -> Lesson:
        objectives = list(self.lesson.objectives)
        if not 0 <= index < len(objectives):
            return self.lesson
        objectives[index] = text
        return await self.set_field("objectives", objectives)

    async def remove_objective(self, index: int) -> Lesson:
        """Remove an objective; the last remaining one is never removed."""
        objectives = self.lesson.objectives
        if len(objectives) <= 1 or not 0 <= index < len(objectives):
            return self.lesson
        return await self.set_field(
            "objectives", [obj for i, obj in enumerate(objectives) if i != index]
        )

    async def set_intro(self, text: str) -> Lesson:
        return await self.set_field("introParts", [text])

    async def set_tags(self, text: str) -> Lesson:
        """Set tags from comma-separated input."""
        return await self.set_field("tags", [t.strip() for t in text.split(",") if t.strip()])

    async def publish(self) -> Lesson:
        return await self.set_field("isPublished", True)

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    async def start_new_activity(self, activity_type: str = "multiple-choice") -> Activity | None:
        await self.dispatch(StartDraft(activity_type=activity_type))
        return self.draft

    async def edit_activity(self, activity_id: str) -> Activity | None:
        await self.dispatch(StartDraft(activity_id=activity_id))
        return self.draft

    async def edit_draft(
        self, operation: Callable[..., Activity], *args: Any, **kwargs: Any
    ) -> Activity | None:
        """Apply an activity-editor operation to the open draft.

        Example::

            await session.edit_draft(activity_editor.set_correct_option, 1)
        """
        if self.draft is None:
            return None
        await self.dispatch(ReviseDraft(operation(self.draft, *args, **kwargs)))
        return self.draft

    async def save_activity(self) -> list[str]:
        """Validate and commit the draft; return the validation errors."""
        await self.dispatch(SaveDraft())
        return list(self._state.validation_errors)

    async def cancel_activity(self) -> None:
        await self.dispatch(CancelDraft())

    async def delete_activity(self, activity_id: str) -> bool:
        """Delete an activity after confirmation; return True if deleted."""
        if not any(a.id == activity_id for a in self.lesson.activities):
            return False
        if self._confirm_delete is not None and not self._confirm_delete(activity_id):
            logger.info("Deletion of activity id=%s cancelled", activity_id)
            return False
        await self.dispatch(DeleteActivity(id=activity_id))
        return True

    async def reorder_activities(self, activity_ids: Sequence[str]) -> bool:
        """Reorder activities; *activity_ids* must be a permutation of the current ids."""
        by_id = {a.id: a for a in self.lesson.activities}
        if sorted(activity_ids) != sorted(by_id):
            logger.debug("Reorder refused: ids are not a permutation")
            return False
        await self.dispatch(ReorderActivities([by_id[i] for i in activity_ids]))
        return True

    # ------------------------------------------------------------------
    # Audio attachment
    # ------------------------------------------------------------------

    async def attach_audio(
        self, target: MediaTarget, file: Any, index: int | None = None
    ) -> bool:
        """Upload *file* and store its descriptor on a draft media element.

        Other edits may run while the upload is pending; the descriptor is
        applied to whatever the draft is when the upload resolves. If the
        draft was saved, cancelled or replaced meanwhile, the result is
        dropped.

        Returns:
            True if the descriptor was stored on the draft.
        """
        if self.draft is None:
            return False
        epoch = self._draft_epoch
        try:
            audio = await self._uploader.upload(file)
        except AudioUploadError as exc:
            logger.warning("Audio attachment failed for %s: %s", target, exc)
            return False

        if epoch != self._draft_epoch or self.draft is None:
            logger.info("Dropping audio %s: draft closed during upload", audio.name)
            return False
        await self.dispatch(ReviseDraft(set_audio_file(self.draft, target, audio, index)))
        return True

    def attach_audio_in_background(
        self, target: MediaTarget, file: Any, index: int | None = None
    ) -> asyncio.Task:
        """Start :meth:`attach_audio` as a task and return it without waiting."""
        task = asyncio.create_task(self.attach_audio(target, file, index))
        self._uploads.add(task)
        task.add_done_callback(self._uploads.discard)
        return task

    async def wait_for_uploads(self) -> None:
        """Wait until every background upload has resolved."""
        if self._uploads:
            await asyncio.gather(*self._uploads)
