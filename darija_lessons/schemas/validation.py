"""Pydantic v2 schemas for activity validation responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ActivityValidationResponse(BaseModel):
    """Response for POST /activities/validate.

    Attributes:
        valid: Whether the activity can be saved.
        errors: Human-readable reasons it cannot, in rule order.
    """

    model_config = ConfigDict(strict=False, populate_by_name=True)

    valid: bool
    errors: list[str] = Field(default_factory=list)
