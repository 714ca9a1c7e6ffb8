"""User Service — validation and uniqueness rules in front of the repository.

Invariants:
    - create_user: empty email → InvalidInputError; existing email →
      DuplicateEmailError; otherwise the repository stores the user
    - get_user: empty id → InvalidInputError; NotFoundError → UserNotFoundError
    - DuplicateKeyError from create → DuplicateEmailError (or DuplicateUserIdError
      when the id collided)
    - Only NotFoundError / DuplicateKeyError are translated; every other error
      propagates unchanged
    - A missing id is replaced by a fresh UUID4 string before insert
"""

import logging
import uuid
from dataclasses import replace

from userapi.core.domain_types import User, UserId
from userapi.core.errors import (
    DuplicateEmailError,
    DuplicateKeyError,
    DuplicateUserIdError,
    InvalidInputError,
    NotFoundError,
    UserNotFoundError,
)
from userapi.core.repository_protocols import UserRepository

logger = logging.getLogger(__name__)


def validate_user(user: User) -> None:
    """Raise InvalidInputError if `user` cannot be stored."""
    if not user.email or not user.email.strip():
        raise InvalidInputError("email is required", field="email")


class UserService:
    """Business rules for creating and reading users."""

    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def create_user(self, user: User) -> User:
        validate_user(user)

        if await self.repo.exists_by_email(user.email):
            logger.info("Rejected duplicate email on create")
            raise DuplicateEmailError()

        if not user.id:
            user = replace(user, id=UserId(str(uuid.uuid4())))

        try:
            return await self.repo.create(user)
        except DuplicateKeyError as e:
            if e.field == "id":
                raise DuplicateUserIdError(user.id) from e
            # lost a race with a concurrent insert after the existence check
            raise DuplicateEmailError() from e

    async def get_user(self, user_id: str) -> User:
        if not user_id:
            raise InvalidInputError("user id is required", field="id")

        try:
            return await self.repo.get_by_id(UserId(user_id))
        except NotFoundError as e:
            raise UserNotFoundError(user_id) from e
