"""Domain Types — verifies the User entity and UserId wrapper.

Tests:
    - UserId wraps str
    - Timestamps default to None until the repository stores the user
"""

from userapi.core.domain_types import User, UserId


def test_user_id_wraps_str():
    uid = UserId("abc")
    assert uid == "abc"
    assert isinstance(uid, str)


def test_user_timestamps_default_to_none():
    user = User(id=UserId("u-1"), email="a@example.com", password="pw")
    assert user.created_at is None
    assert user.updated_at is None


def test_users_compare_by_value():
    a = User(id=UserId("u-1"), email="a@example.com", password="pw")
    b = User(id=UserId("u-1"), email="a@example.com", password="pw")
    assert a == b
