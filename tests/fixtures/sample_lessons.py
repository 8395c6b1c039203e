"""Canonical lesson and activity documents for the Darija Lessons test suite.

All documents use the camelCase wire format (``isCorrect``, ``wordBlocks``,
``introParts`` ...) exactly as an authoring client sends them.

GREETINGS_LESSON is the four-activity "Greetings and Goodbyes" lesson:
    1. multiple-choice   "Good morning" — correct option "Sba7 L5eer"
    2. fill-in-blanks    "Smeety Alex, o {nty}?" — one blank, answer "nty"
    3. dialogue          three-line greeting exchange
    4. match-image       three phrase/emoji pairs

Every activity passes validation, so the lesson can be PUT as-is.

LEGACY_GREETINGS_LESSON is the same content in the older document shape:
numeric activity ids, ``wordPool`` instead of ``wordBlocks``, questions
without text, and no titles.  It parses, but its activities do not validate.
"""

from __future__ import annotations

import copy

# ---------------------------------------------------------------------------
# Activities (valid)
# ---------------------------------------------------------------------------

MULTIPLE_CHOICE_ACTIVITY: dict = {
    "id": "act-mc",
    "type": "multiple-choice",
    "title": "Morning greeting",
    "question": {
        "text": "Kifash katgoul 'Good morning'?",
        "translation": "What is the correct way to say 'Good morning'?",
        "audioUrl": "/audio/q_morning.mp3",
    },
    "options": [
        {"id": "o1", "text": "Msa L5eer", "translation": "Good evening", "isCorrect": False},
        {"id": "o2", "text": "Sba7 L5eer", "translation": "Good morning", "isCorrect": True},
        {"id": "o3", "text": "B'slama", "translation": "Goodbye", "isCorrect": False},
    ],
    "difficulty": "beginner",
    "timeEstimate": 2,
    "feedback": "Sba7 L5eer literally means 'Morning of goodness'.",
}

FILL_IN_BLANKS_ACTIVITY: dict = {
    "id": "act-fill",
    "type": "fill-in-blanks",
    "title": "Nta or Nty",
    "question": {
        "text": "Smeety Alex, o {nty}?",
        "translation": "How about you? (Addressing a female)",
    },
    "wordBlocks": ["nta", "nty", "Labass", "Smeetk"],
    "feedback": "Remember to use NTY when asking a female.",
}

DIALOGUE_ACTIVITY: dict = {
    "id": "act-dialogue",
    "type": "dialogue",
    "title": "A short exchange",
    "question": {
        "text": "Qra o sme3 l7iwar",
        "translation": "Read and listen to the conversation:",
    },
    "items": [
        {"id": "d1", "text": "Salam!", "translation": "Hello!"},
        {"id": "d2", "text": "Wa 3alaykum assalam!", "translation": "Hello (response)!"},
        {"id": "d3", "text": "Keedayr?", "translation": "How are you? (Masc)"},
    ],
    "feedback": "This is a typical short greeting exchange.",
}

MATCH_IMAGE_ACTIVITY: dict = {
    "id": "act-match",
    "type": "match-image",
    "title": "Phrases and pictures",
    "question": {
        "text": "Jme3 l'ibara m3a tswira",
        "translation": "Match the phrase with the correct emoji:",
    },
    "pairs": [
        {"id": "p1", "text": "Tsb7 3la 5eer", "translation": "Good night", "image": "🌃"},
        {"id": "p3", "text": "B'slama", "translation": "Goodbye", "image": "👋"},
        {"id": "p2", "text": "Msa L5eer", "translation": "Good evening", "image": "🌇"},
    ],
    "feedback": "Good use of visual aids!",
}

# ---------------------------------------------------------------------------
# GREETINGS_LESSON: four valid activities
# ---------------------------------------------------------------------------

GREETINGS_LESSON: dict = {
    "id": "lesson-greetings",
    "title": "Lesson 1: Greetings and Goodbyes",
    "description": "Basic Moroccan Darija greetings.",
    "level": "beginner",
    "objectives": [
        "Use greeting and goodbye expressions.",
        "Correctly use Nta/Nty.",
    ],
    "introParts": [
        "Welcome! This lesson covers basic Moroccan Darija greetings and goodbyes.",
    ],
    "activities": [
        MULTIPLE_CHOICE_ACTIVITY,
        FILL_IN_BLANKS_ACTIVITY,
        DIALOGUE_ACTIVITY,
        MATCH_IMAGE_ACTIVITY,
    ],
    "tags": ["greetings"],
    "currentView": "builder",
    "isSaved": False,
    "isPublished": False,
    "createdAt": "2026-01-10T09:00:00+00:00",
    "updatedAt": "2026-01-10T09:30:00+00:00",
}

# ---------------------------------------------------------------------------
# LEGACY_GREETINGS_LESSON: older document shape
# ---------------------------------------------------------------------------

LEGACY_GREETINGS_LESSON: dict = {
    "title": "Lesson 1: Greetings and Goodbyes",
    "objectives": ["Use greeting and goodbye expressions."],
    "introParts": ["Welcome!"],
    "activities": [
        {
            "id": 1,
            "type": "multiple-choice",
            "question": {"translation": "What is the correct way to say 'Good morning'?"},
            "options": [
                {"text": "Msa L5eer", "isCorrect": False},
                {"text": "Sba7 L5eer", "isCorrect": True},
            ],
            # Fields of other activity types are ignored on input.
            "items": [{"text": "stray"}],
            "wordBlocks": ["stray"],
        },
        {
            "id": 2,
            "type": "fill-in-blanks",
            "question": {"text": "Smeety Alex, o {nty}?"},
            "wordPool": ["nta", "nty", "Labass", "Smeetk"],
        },
    ],
}


def greetings_document(**overrides) -> dict:
    """Return a deep copy of GREETINGS_LESSON with top-level *overrides* applied."""
    lesson = copy.deepcopy(GREETINGS_LESSON)
    lesson.update(overrides)
    return lesson
