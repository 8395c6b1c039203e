"""Pydantic v2 schemas for the Activity document.

The Activity document is the contract between the authoring side and the
learner side. It is a tagged union keyed by ``type``: each variant carries
only the collections that are meaningful for it. On the wire every field uses
its camelCase name (``isCorrect``, ``audioUrl``, ``wordBlocks``, ...).
Fields that belong to another variant are ignored on input.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from darija_lessons.services.ids import new_id

ActivityType = Literal[
    "multiple-choice",
    "fill-in-blanks",
    "ordering",
    "dialogue",
    "match-image",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]

ACTIVITY_TYPES: tuple[str, ...] = (
    "multiple-choice",
    "fill-in-blanks",
    "ordering",
    "dialogue",
    "match-image",
)

_M = TypeVar("_M", bound="DocumentModel")


class DocumentModel(BaseModel):
    """Base for every persisted document model (camelCase on the wire)."""

    model_config = ConfigDict(
        strict=False,
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def with_changes(self: _M, **changes: Any) -> _M:
        """Return a re-validated copy with *changes* applied (attribute names).

        Unlike ``model_copy(update=...)`` the result goes through validation,
        so a value the schema does not allow raises
        :class:`pydantic.ValidationError` and the original is left as is.
        """
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self).model_validate(data)


class AudioFile(DocumentModel):
    """Descriptor returned by the audio attachment service.

    Attributes:
        name: Original file name.
        url: Playback URL.
    """

    name: str
    url: str


class MediaElement(DocumentModel):
    """A bilingual phrase with optional audio.

    Attributes:
        id: Element identifier.
        text: Darija phrase (or the sentence template for fill-in-blanks).
        translation: English translation.
        audio_ref: Attached audio descriptor, if any.
        audio_url: URL used for playback.
    """

    id: str = Field(default_factory=new_id)
    text: str = ""
    translation: str = ""
    audio_ref: AudioFile | None = Field(
        default=None,
        validation_alias=AliasChoices("audioRef", "audioFile", "audio_ref"),
        serialization_alias="audioRef",
    )
    audio_url: str | None = None


class Option(MediaElement):
    """A multiple-choice answer."""

    is_correct: bool = False


class Pair(MediaElement):
    """A phrase matched against an image or emoji."""

    image: str = ""


class ActivityBase(DocumentModel):
    """Fields shared by every activity variant.

    Attributes:
        id: Stable identifier, assigned when the activity is added to a lesson.
        title: Author-facing title.
        description: Optional description.
        question: The question or instruction shown to the learner.
        difficulty: One of ``beginner``, ``intermediate``, ``advanced``.
        time_estimate: Expected duration in minutes.
        feedback: Message shown to the learner after a correct answer.
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str = ""
    question: MediaElement = Field(default_factory=MediaElement)
    difficulty: Difficulty = "beginner"
    time_estimate: int = 5
    feedback: str | None = None


class MultipleChoiceActivity(ActivityBase):
    type: Literal["multiple-choice"] = "multiple-choice"
    options: list[Option] = Field(default_factory=list)


class FillInBlanksActivity(ActivityBase):
    """Sentence template in ``question.text``; ``word_blocks`` are the tiles."""

    type: Literal["fill-in-blanks"] = "fill-in-blanks"
    word_blocks: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("wordBlocks", "wordPool", "word_blocks"),
        serialization_alias="wordBlocks",
    )


class OrderingActivity(ActivityBase):
    type: Literal["ordering"] = "ordering"
    items: list[MediaElement] = Field(default_factory=list)


class DialogueActivity(ActivityBase):
    type: Literal["dialogue"] = "dialogue"
    items: list[MediaElement] = Field(default_factory=list)


class MatchImageActivity(ActivityBase):
    type: Literal["match-image"] = "match-image"
    pairs: list[Pair] = Field(default_factory=list)


Activity = Annotated[
    Union[
        MultipleChoiceActivity,
        FillInBlanksActivity,
        OrderingActivity,
        DialogueActivity,
        MatchImageActivity,
    ],
    Field(discriminator="type"),
]

ACTIVITY_ADAPTER: TypeAdapter[Activity] = TypeAdapter(Activity)


def parse_activity(data: dict) -> Activity:
    """Parse an Activity JSON document into its typed variant."""
    return ACTIVITY_ADAPTER.validate_python(data)
