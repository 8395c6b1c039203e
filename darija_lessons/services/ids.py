"""Identifier and clock helpers shared by the schemas and state machines.

Identifiers are random UUID4 hex strings so that rapid creation (two
activities saved within the same millisecond) can never collide.
"""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Return a fresh, collision-free identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(timezone.utc)
