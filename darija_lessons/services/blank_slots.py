"""Blank-slot assignment engine for fill-in-the-blanks steps.

The learner taps word tiles from a shuffled pool; each tap fills the lowest
empty blank. Tapping a filled blank returns its word to the pool. Once the
step has been checked the engine is locked and ignores further taps.
"""

import logging
import random
from collections import Counter
from typing import Sequence

from darija_lessons.schemas.activity import FillInBlanksActivity
from darija_lessons.schemas.template import TokenizedTemplate
from darija_lessons.services.tokenizer import tokenize

logger = logging.getLogger(__name__)


def build_word_pool(word_blocks: Sequence[str], correct_words: Sequence[str]) -> list[str]:
    """Return the tiles for a step: the word blocks plus any missing answers.

    Authors usually list only distractors, so every correct word that the
    blocks do not already cover (counting repeats) is added.
    """
    pool = list(word_blocks)
    remaining = Counter(pool)
    for word in correct_words:
        if remaining[word] > 0:
            remaining[word] -= 1
        else:
            pool.append(word)
    return pool


class BlankSlotEngine:
    """Word pool <-> blank slot assignment for one fill-in-blanks step.

    Args:
        template: Tokenized sentence template.
        word_pool: Tiles offered to the learner (shuffled on entry).
        rng: Random source for shuffling; pass a seeded one for tests.
    """

    def __init__(
        self,
        template: TokenizedTemplate,
        word_pool: Sequence[str],
        rng: random.Random | None = None,
    ) -> None:
        self.template = template
        self._rng = rng or random.Random()
        self.available_words: list[str] = self._shuffled(word_pool)
        self.blanks_state: dict[int, str] = {}
        self.locked = False

    @classmethod
    def for_activity(
        cls, activity: FillInBlanksActivity, rng: random.Random | None = None
    ) -> "BlankSlotEngine":
        template = tokenize(activity.question.text)
        pool = build_word_pool(activity.word_blocks, template.correct_words)
        return cls(template, pool, rng)

    def _shuffled(self, words: Sequence[str]) -> list[str]:
        shuffled = list(words)
        self._rng.shuffle(shuffled)
        return shuffled

    @property
    def blank_indices(self) -> list[int]:
        return [b.blank for b in self.template.blanks]

    @property
    def all_blanks_filled(self) -> bool:
        return all(index in self.blanks_state for index in self.blank_indices)

    def tap_word(self, word: str) -> bool:
        """Put *word* into the first empty blank; return True if placed."""
        if self.locked or word not in self.available_words:
            return False
        target = next((i for i in self.blank_indices if i not in self.blanks_state), None)
        if target is None:
            return False
        self.blanks_state[target] = word
        self.available_words.remove(word)
        return True

    def tap_blank(self, index: int) -> bool:
        """Clear blank *index* and return its word to the pool."""
        if self.locked:
            return False
        word = self.blanks_state.pop(index, None)
        if word is None:
            return False
        self.available_words = self._shuffled([*self.available_words, word])
        return True

    def is_correct(self) -> bool:
        """Every blank holds exactly its expected word (case-sensitive)."""
        return all(
            self.blanks_state.get(blank.blank) == blank.correct
            for blank in self.template.blanks
        )

    def lock(self) -> None:
        self.locked = True
