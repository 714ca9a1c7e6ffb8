"""User Schemas — verifies the request/response boundary models.

Tests:
    - UserCreate accepts an empty or missing email (the service rejects it)
    - to_entity() maps a missing id to an empty UserId
    - id and email longer than 255 characters are rejected
    - UserResponse never exposes the password
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from userapi.core.domain_types import User, UserId
from userapi.schemas.user import UserCreate, UserResponse


def test_user_create_defaults_to_empty_fields():
    body = UserCreate()
    assert body.id is None
    assert body.email == ""
    assert body.password == ""


def test_to_entity_keeps_supplied_id():
    user = UserCreate(id="u-1", email="a@example.com", password="pw").to_entity()
    assert user == User(id=UserId("u-1"), email="a@example.com", password="pw")


def test_to_entity_without_id_leaves_it_empty():
    user = UserCreate(email="a@example.com").to_entity()
    assert user.id == ""


def test_user_create_rejects_wrong_types():
    with pytest.raises(ValidationError):
        UserCreate(email=["not", "a", "string"])


def test_user_create_rejects_overlong_id():
    with pytest.raises(ValidationError):
        UserCreate(id="x" * 256, email="a@example.com")


def test_response_has_no_password():
    now = datetime.now(timezone.utc)
    user = User(
        id=UserId("u-1"), email="a@example.com", password="secret",
        created_at=now, updated_at=now,
    )
    dumped = UserResponse.from_entity(user).model_dump()
    assert "password" not in dumped
    assert dumped["id"] == "u-1"
    assert dumped["created_at"] == now


def test_user_create_rejects_overlong_email():
    with pytest.raises(ValidationError):
        UserCreate(email="a" * 256)


def test_user_create_accepts_email_at_column_width():
    assert len(UserCreate(email="a" * 255).email) == 255
