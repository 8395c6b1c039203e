"""Pydantic v2 schemas for tokenized fill-in-the-blanks templates."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TextToken(BaseModel):
    """Literal text between blanks."""

    model_config = ConfigDict(strict=False, populate_by_name=True)

    text: str


class BlankToken(BaseModel):
    """A blank slot.

    Attributes:
        blank: Zero-based index in left-to-right order.
        correct: The expected word.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    blank: int = Field(..., ge=0)
    correct: str


SentenceToken = Union[TextToken, BlankToken]


class TokenizedTemplate(BaseModel):
    """Result of tokenizing a template such as ``"Smeety Alex, o {nty}?"``.

    Serialized as ``{sentenceTemplate, correctWords}``.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True, alias_generator=to_camel)

    sentence_template: list[SentenceToken] = Field(default_factory=list)
    correct_words: list[str] = Field(default_factory=list)

    @property
    def blanks(self) -> list[BlankToken]:
        return [t for t in self.sentence_template if isinstance(t, BlankToken)]


class TokenizeRequest(BaseModel):
    """Request payload for POST /activities/tokenize."""

    model_config = ConfigDict(strict=False, populate_by_name=True)

    template: str = Field(default="", description="Sentence with {word} blanks")
