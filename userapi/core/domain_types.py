"""Domain Types — the User entity and its identity type.

Invariants:
    - UserId wraps str — ids are opaque strings chosen by the client or the service
    - User is a plain record: no IO, no ORM state, no validation
    - Timestamps are timezone-aware (UTC) once the repository has stored them

Design Decisions:
    - dataclass over Pydantic model: the service and repository exchange it
      without any serialization concerns; schemas/ owns the HTTP shape
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NewType


UserId = NewType("UserId", str)


@dataclass
class User:
    """User entity — the only aggregate in the system."""
    id: UserId
    email: str
    password: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
