"""Fill-in-the-blanks template tokenizer.

A template marks each blank with braces, e.g. ``"Smeety Alex, o {nty}?"``.
Tokenizing splits it into literal text and numbered blanks, and collects the
expected answers in order::

    result = tokenize("Smeety Alex, o {nty}?")
    result.sentence_template  # [Text "Smeety Alex, o ", Blank 0 "nty", Text "?"]
    result.correct_words      # ["nty"]

Malformed input never raises: a ``{`` without a matching ``}`` (or a group
containing another brace) is kept as literal text.
"""

import re
from typing import Iterable

from darija_lessons.schemas.template import (
    BlankToken,
    SentenceToken,
    TextToken,
    TokenizedTemplate,
)

# A blank is a brace group with no nested braces.
_BLANK_PATTERN = re.compile(r"(\{[^{}]*\})")


def tokenize(template: str | None) -> TokenizedTemplate:
    """Split *template* into text and blank tokens.

    Args:
        template: Sentence template, may be ``None`` or empty.

    Returns:
        The ordered tokens and the list of correct words.
    """
    if not template:
        return TokenizedTemplate()

    tokens: list[SentenceToken] = []
    correct_words: list[str] = []

    for part in _BLANK_PATTERN.split(template):
        if not part:
            continue
        if _BLANK_PATTERN.fullmatch(part):
            word = part[1:-1].strip()
            tokens.append(BlankToken(blank=len(correct_words), correct=word))
            correct_words.append(word)
        else:
            tokens.append(TextToken(text=part))

    return TokenizedTemplate(sentence_template=tokens, correct_words=correct_words)


def reconstruct(tokens: Iterable[SentenceToken]) -> str:
    """Rebuild a template string from tokens (blanks become ``{correct}``)."""
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, BlankToken):
            parts.append("{" + token.correct + "}")
        else:
            parts.append(token.text)
    return "".join(parts)


def has_blanks(template: str | None) -> bool:
    """Return True if *template* contains at least one well-formed blank."""
    return bool(template) and _BLANK_PATTERN.search(template) is not None
