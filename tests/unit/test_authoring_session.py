"""Unit tests for the authoring state machine (darija_lessons/services/authoring.py).

Covers the pure ``authoring_reducer`` (draft sub-state) and the
``AuthoringSession`` effects: persistence after committed changes, audio
attachment racing other edits, and delete confirmation.

All tests run against the in-memory lesson store; no database is used.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from darija_lessons.exceptions import (
    AudioUploadError,
    DatabaseConnectionError,
    LessonNotFoundError,
)
from darija_lessons.schemas.activity import AudioFile
from darija_lessons.schemas.lesson import Lesson
from darija_lessons.services import activity_editor as editor
from darija_lessons.services.authoring import (
    AuthoringSession,
    AuthoringState,
    CancelDraft,
    ReviseDraft,
    SaveDraft,
    StartDraft,
    authoring_reducer,
)
from darija_lessons.services.lesson_reducer import SetField
from darija_lessons.services.validator import QUESTION_REQUIRED, TITLE_REQUIRED


async def _fill_valid_mc(session: AuthoringSession, title: str = "Morning greeting") -> None:
    """Open a multiple-choice draft and make it pass validation."""
    await session.start_new_activity("multiple-choice")
    await session.edit_draft(editor.set_field, "title", title)
    await session.edit_draft(editor.set_media_field, "question", "text", "Kifash katgoul?")
    await session.edit_draft(editor.set_media_field, "options", "text", "Sba7 L5eer", 0)
    await session.edit_draft(editor.set_media_field, "options", "text", "Msa L5eer", 1)


class _GatedUploader:
    """Uploader whose uploads resolve only when the test releases them."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}

    async def upload(self, file) -> AudioFile:
        gate = self.gates.setdefault(file, asyncio.Event())
        await gate.wait()
        return AudioFile(name=file, url=f"https://cdn.test/{file}")

    def release(self, file: str) -> None:
        self.gates.setdefault(file, asyncio.Event()).set()


# ---------------------------------------------------------------------------
# authoring_reducer (pure)
# ---------------------------------------------------------------------------


def test_start_draft_opens_default_draft():
    state = authoring_reducer(AuthoringState(lesson=Lesson()), StartDraft())

    assert state.draft is not None
    assert state.draft.type == "multiple-choice"
    assert state.editing_id is None
    assert state.is_editing is False


@pytest.mark.parametrize("activity_id", [None, "act-mc"])
def test_start_draft_enters_builder_from_setup(greetings_lesson, activity_id):
    """New and existing drafts both move the lesson from setup to builder."""
    lesson = greetings_lesson.model_copy(update={"current_view": "setup"})

    state = authoring_reducer(AuthoringState(lesson=lesson), StartDraft(activity_id=activity_id))

    assert state.draft is not None
    assert state.lesson.current_view == "builder"


def test_start_draft_unknown_type_is_refused():
    state = AuthoringState(lesson=Lesson())

    assert authoring_reducer(state, StartDraft(activity_type="crossword")) is state


def test_start_draft_for_existing_activity_copies_it(greetings_lesson):
    state = AuthoringState(lesson=greetings_lesson)

    result = authoring_reducer(state, StartDraft(activity_id="act-dialogue"))

    assert result.is_editing
    assert result.editing_id == "act-dialogue"
    assert result.draft == greetings_lesson.activities[2]
    assert result.draft is not greetings_lesson.activities[2], "Draft must be a copy"


def test_revise_without_draft_is_refused(greetings_lesson):
    state = AuthoringState(lesson=greetings_lesson)

    assert authoring_reducer(state, ReviseDraft(greetings_lesson.activities[0])) is state


def test_save_invalid_draft_records_errors_and_keeps_lesson():
    state = authoring_reducer(
        AuthoringState(lesson=Lesson()), StartDraft(activity_type="dialogue")
    )

    saved = authoring_reducer(state, SaveDraft())

    assert saved.lesson is state.lesson, "An invalid draft must not touch the lesson"
    assert saved.draft is state.draft
    assert TITLE_REQUIRED in saved.validation_errors
    assert QUESTION_REQUIRED in saved.validation_errors


def test_cancel_draft_discards_it(greetings_lesson):
    state = authoring_reducer(
        AuthoringState(lesson=greetings_lesson), StartDraft(activity_id="act-mc")
    )

    result = authoring_reducer(state, CancelDraft())

    assert result.draft is None
    assert result.lesson.activities == greetings_lesson.activities


def test_lesson_actions_pass_through_and_keep_draft():
    state = authoring_reducer(AuthoringState(lesson=Lesson()), StartDraft())

    result = authoring_reducer(state, SetField("title", "Greetings"))

    assert result.lesson.title == "Greetings"
    assert result.draft is state.draft


# ---------------------------------------------------------------------------
# Session: lesson navigation and fields
# ---------------------------------------------------------------------------


async def test_create_lesson_enters_setup(authoring_session):
    lesson = await authoring_session.create_lesson()

    assert lesson.current_view == "setup"
    assert authoring_session.lesson is lesson


async def test_objectives_never_drop_below_one(authoring_session):
    await authoring_session.create_lesson()
    await authoring_session.update_objective(0, "Use greetings.")
    await authoring_session.add_objective()
    await authoring_session.update_objective(1, "Use Nta/Nty.")

    await authoring_session.remove_objective(0)
    lesson = await authoring_session.remove_objective(0)

    assert lesson.objectives == ["Use Nta/Nty."], "The last objective must remain"


async def test_intro_tags_and_publish(authoring_session):
    await authoring_session.create_lesson()

    await authoring_session.set_intro("Welcome!")
    await authoring_session.set_tags("greetings, beginner ,")
    lesson = await authoring_session.publish()

    assert lesson.intro_parts == ["Welcome!"]
    assert lesson.tags == ["greetings", "beginner"]
    assert lesson.is_published is True


async def test_load_lesson_missing_raises(authoring_session):
    with pytest.raises(LessonNotFoundError):
        await authoring_session.load_lesson("nope")


async def test_load_lesson_from_store(seeded_store, instant_uploader):
    session = AuthoringSession(store=seeded_store, uploader=instant_uploader)

    lesson = await session.load_lesson("lesson-greetings")

    assert lesson.current_view == "setup"
    assert len(lesson.activities) == 4
    assert [l.id for l in await session.list_lessons()] == ["lesson-greetings"]


# ---------------------------------------------------------------------------
# Session: drafts and persistence
# ---------------------------------------------------------------------------


async def test_lesson_without_activities_is_not_persisted(authoring_session, lesson_store):
    await authoring_session.create_lesson()
    await authoring_session.set_field("title", "Greetings")

    assert len(lesson_store) == 0
    assert authoring_session.lesson.is_saved is False


async def test_saving_valid_draft_adds_activity_and_persists(authoring_session, lesson_store):
    await authoring_session.create_lesson()
    await authoring_session.go_to("builder")
    await _fill_valid_mc(authoring_session)

    errors = await authoring_session.save_activity()

    assert errors == []
    assert authoring_session.draft is None
    lesson = authoring_session.lesson
    assert len(lesson.activities) == 1
    assert lesson.is_saved is True
    stored = await lesson_store.get(lesson.id)
    assert stored is not None and stored.activities[0].title == "Morning greeting"


async def test_saving_invalid_draft_keeps_it_open(authoring_session, lesson_store):
    await authoring_session.create_lesson()
    await authoring_session.start_new_activity("match-image")

    errors = await authoring_session.save_activity()

    assert errors, "An empty match-image draft must not validate"
    assert authoring_session.draft is not None
    assert authoring_session.lesson.activities == []
    assert len(lesson_store) == 0


async def test_every_committed_change_is_upserted(authoring_session, lesson_store):
    await authoring_session.create_lesson()
    await _fill_valid_mc(authoring_session)
    await authoring_session.save_activity()

    await authoring_session.set_field("title", "Greetings v2")

    stored = await lesson_store.get(authoring_session.lesson.id)
    assert stored.title == "Greetings v2"
    assert len(lesson_store) == 1, "Upsert must overwrite, not duplicate"


async def test_editing_existing_activity_preserves_id(authoring_session):
    await authoring_session.create_lesson()
    await authoring_session.go_to("builder")
    await _fill_valid_mc(authoring_session)
    await authoring_session.save_activity()
    activity_id = authoring_session.lesson.activities[0].id

    await authoring_session.edit_activity(activity_id)
    await authoring_session.edit_draft(editor.set_field, "title", "Evening greeting")
    await authoring_session.save_activity()

    activity = authoring_session.lesson.activities[0]
    assert activity.id == activity_id
    assert activity.title == "Evening greeting"
    assert len(authoring_session.lesson.activities) == 1


async def test_store_failure_is_logged_and_marks_unsaved(instant_uploader, caplog):
    store = AsyncMock()
    store.upsert = AsyncMock(side_effect=DatabaseConnectionError("connection refused"))
    session = AuthoringSession(store=store, uploader=instant_uploader)
    await session.create_lesson()
    await _fill_valid_mc(session)

    errors = await session.save_activity()

    assert errors == []
    assert len(session.lesson.activities) == 1, "The in-memory change still happens"
    assert session.lesson.is_saved is False
    assert "not saved" in caplog.text


# ---------------------------------------------------------------------------
# Session: delete and reorder
# ---------------------------------------------------------------------------


async def test_delete_requires_confirmation(seeded_store, instant_uploader):
    asked: list[str] = []

    def refuse(activity_id: str) -> bool:
        asked.append(activity_id)
        return False

    session = AuthoringSession(store=seeded_store, uploader=instant_uploader, confirm_delete=refuse)
    await session.load_lesson("lesson-greetings")

    deleted = await session.delete_activity("act-fill")

    assert deleted is False
    assert asked == ["act-fill"]
    assert len(session.lesson.activities) == 4


async def test_confirmed_delete_removes_and_persists(seeded_store, instant_uploader):
    session = AuthoringSession(
        store=seeded_store, uploader=instant_uploader, confirm_delete=lambda _id: True
    )
    await session.load_lesson("lesson-greetings")

    assert await session.delete_activity("act-fill") is True

    stored = await seeded_store.get("lesson-greetings")
    assert [a.id for a in stored.activities] == ["act-mc", "act-dialogue", "act-match"]


async def test_delete_unknown_activity_does_not_ask(seeded_store, instant_uploader):
    def fail(_activity_id: str) -> bool:
        raise AssertionError("confirmation must not be requested")

    session = AuthoringSession(store=seeded_store, uploader=instant_uploader, confirm_delete=fail)
    await session.load_lesson("lesson-greetings")

    assert await session.delete_activity("ghost") is False


async def test_reorder_requires_permutation(seeded_store, instant_uploader):
    session = AuthoringSession(store=seeded_store, uploader=instant_uploader)
    await session.load_lesson("lesson-greetings")

    assert await session.reorder_activities(["act-mc", "act-fill"]) is False
    assert await session.reorder_activities(
        ["act-match", "act-mc", "act-fill", "act-dialogue"]
    ) is True
    assert [a.id for a in session.lesson.activities] == [
        "act-match",
        "act-mc",
        "act-fill",
        "act-dialogue",
    ]


# ---------------------------------------------------------------------------
# Session: audio attachment
# ---------------------------------------------------------------------------


async def test_attach_audio_sets_descriptor(authoring_session):
    await authoring_session.start_new_activity("dialogue")

    attached = await authoring_session.attach_audio("items", "recordings/salam.mp3", 0)

    assert attached is True
    item = authoring_session.draft.items[0]
    assert item.audio_ref.name == "salam.mp3"
    assert item.audio_url.startswith("https://cdn.test/audio/")
    assert item.audio_url.endswith("/salam.mp3")


async def test_attach_audio_without_draft_is_refused(authoring_session):
    assert await authoring_session.attach_audio("question", "salam.mp3") is False


async def test_attach_audio_failure_leaves_draft_unchanged(lesson_store):
    uploader = AsyncMock()
    uploader.upload = AsyncMock(side_effect=AudioUploadError("rejected", file_name="x.wav"))
    session = AuthoringSession(store=lesson_store, uploader=uploader)
    draft = await session.start_new_activity()

    assert await session.attach_audio("question", "x.wav") is False
    assert session.draft == draft


async def test_edits_during_upload_are_kept(lesson_store):
    """An upload resolving late applies to the draft as edited meanwhile."""
    uploader = _GatedUploader()
    session = AuthoringSession(store=lesson_store, uploader=uploader)
    await session.start_new_activity()

    task = session.attach_audio_in_background("question", "q.mp3")
    await asyncio.sleep(0)
    await session.edit_draft(editor.set_field, "title", "Edited while uploading")
    uploader.release("q.mp3")
    await task

    assert session.draft.title == "Edited while uploading"
    assert session.draft.question.audio_ref.name == "q.mp3"


async def test_last_upload_to_resolve_wins(lesson_store):
    uploader = _GatedUploader()
    session = AuthoringSession(store=lesson_store, uploader=uploader)
    await session.start_new_activity()

    session.attach_audio_in_background("question", "first.mp3")
    session.attach_audio_in_background("question", "second.mp3")
    await asyncio.sleep(0)
    uploader.release("second.mp3")
    await asyncio.sleep(0)
    uploader.release("first.mp3")
    await session.wait_for_uploads()

    assert session.draft.question.audio_ref.name == "first.mp3"


async def test_upload_for_closed_draft_is_dropped(lesson_store):
    uploader = _GatedUploader()
    session = AuthoringSession(store=lesson_store, uploader=uploader)
    await session.start_new_activity()

    task = session.attach_audio_in_background("question", "late.mp3")
    await asyncio.sleep(0)
    await session.cancel_activity()
    await session.start_new_activity("dialogue")
    uploader.release("late.mp3")

    assert await task is False
    assert session.draft.question.audio_ref is None, "Audio must not leak into a new draft"
