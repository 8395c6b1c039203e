"""
Activity endpoints — validation and fill-in-the-blanks tokenizing.

Both are pure functions exposed over HTTP so an authoring client can show
validation errors and a blank preview before saving.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body

from darija_lessons.schemas.activity import parse_activity
from darija_lessons.schemas.template import TokenizedTemplate, TokenizeRequest
from darija_lessons.schemas.validation import ActivityValidationResponse
from darija_lessons.services.tokenizer import tokenize
from darija_lessons.services.validator import validate_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activities", tags=["activities"])


@router.post(
    "/validate",
    response_model=ActivityValidationResponse,
    summary="Validate an activity draft",
)
async def validate(payload: dict[str, Any] = Body(...)) -> ActivityValidationResponse:
    """Return the validation errors for an Activity JSON document.

    A document with an unknown ``type`` is rejected by request parsing (422).
    """
    activity = parse_activity(payload)
    errors = validate_activity(activity)
    return ActivityValidationResponse(valid=not errors, errors=errors)


@router.post(
    "/tokenize",
    response_model=TokenizedTemplate,
    summary="Tokenize a fill-in-the-blanks template",
)
async def tokenize_template(payload: TokenizeRequest) -> TokenizedTemplate:
    """Split ``template`` into text and blank tokens."""
    return tokenize(payload.template)
