"""User Schemas — Pydantic models for the /api/users boundary.

Invariants:
    - UserCreate accepts an empty email: the emptiness rule belongs to the
      service, so the request must reach it to yield INVALID_INPUT
    - id and email are capped at 255 characters, the width of their columns
    - UserResponse never includes the password
"""

from datetime import datetime

from pydantic import BaseModel, Field

from userapi.core.domain_types import User, UserId


class UserCreate(BaseModel):
    """POST /api/users body."""
    id: str | None = Field(None, max_length=255)
    email: str = Field("", max_length=255)
    password: str = ""

    def to_entity(self) -> User:
        return User(
            id=UserId(self.id or ""),
            email=self.email,
            password=self.password,
        )


class UserResponse(BaseModel):
    """Public-facing user data."""
    id: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
