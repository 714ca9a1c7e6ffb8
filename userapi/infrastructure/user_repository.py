"""SQL User Repository — implements UserRepository against the pooled async engine.

Invariants:
    - Exactly one SQL statement per operation, each bounded by `timeout` seconds
    - No rows (NoResultFound, or 0 affected rows) → NotFoundError
    - Unique violation on insert/update → DuplicateKeyError naming the column
      ("email" or "id")
    - Every other failure, including asyncio.TimeoutError, propagates unmapped
    - Returned timestamps are timezone-aware UTC
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Awaitable, TypeVar

from sqlalchemy import delete, exists, insert, select, update
from sqlalchemy.exc import IntegrityError, NoResultFound

from userapi.core.domain_types import User, UserId
from userapi.core.errors import DuplicateKeyError, NotFoundError
from userapi.infrastructure.database import (
    DatabaseSessionManager, is_unique_violation, violated_constraint,
)
from userapi.models.user import UserModel

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 3.0

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for DateTime(timezone=True)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _duplicate_field(exc: IntegrityError) -> str:
    constraint = violated_constraint(exc) or "email"
    return "email" if "email" in constraint else "id"


def _to_entity(row: UserModel) -> User:
    return User(
        id=UserId(row.id),
        email=row.email,
        password=row.password,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlUserRepository:
    """UserRepository backed by SQLAlchemy Core statements."""

    def __init__(
        self, db: DatabaseSessionManager, timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._db = db
        self._timeout = timeout

    async def _bounded(self, operation: Awaitable[T]) -> T:
        return await asyncio.wait_for(operation, timeout=self._timeout)

    # ─── Writes ──────────────────────────────────────────────────

    async def create(self, user: User) -> User:
        now = _utcnow()
        stored = replace(
            user,
            created_at=user.created_at or now,
            updated_at=user.updated_at or now,
        )
        await self._bounded(self._insert(stored))
        logger.info("User created", extra={"user_id": stored.id})
        return stored

    async def _insert(self, user: User) -> None:
        stmt = insert(UserModel).values(
            id=user.id,
            email=user.email,
            password=user.password,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        async with self._db.session() as session:
            try:
                await session.execute(stmt)
                await session.commit()
            except IntegrityError as e:
                if is_unique_violation(e):
                    raise DuplicateKeyError("user", _duplicate_field(e)) from e
                raise

    async def update(self, user: User) -> User:
        updated = replace(user, updated_at=_utcnow())
        await self._bounded(self._update(updated))
        return updated

    async def _update(self, user: User) -> None:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id)
            .values(
                email=user.email,
                password=user.password,
                updated_at=user.updated_at,
            )
        )
        async with self._db.session() as session:
            try:
                result = await session.execute(stmt)
            except IntegrityError as e:
                if is_unique_violation(e):
                    raise DuplicateKeyError("user", _duplicate_field(e)) from e
                raise
            if result.rowcount == 0:
                raise NotFoundError("user", user.id)
            await session.commit()

    async def delete(self, user_id: UserId) -> None:
        await self._bounded(self._delete(user_id))

    async def _delete(self, user_id: UserId) -> None:
        stmt = delete(UserModel).where(UserModel.id == user_id)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("user", user_id)
            await session.commit()

    # ─── Reads ───────────────────────────────────────────────────

    async def get_by_id(self, user_id: UserId) -> User:
        return await self._bounded(
            self._get_one(UserModel.id == user_id, user_id),
        )

    async def get_by_email(self, email: str) -> User:
        return await self._bounded(
            self._get_one(UserModel.email == email, email),
        )

    async def _get_one(self, criterion, key: str) -> User:
        async with self._db.session() as session:
            result = await session.execute(select(UserModel).where(criterion))
            try:
                row = result.scalar_one()
            except NoResultFound as e:
                raise NotFoundError("user", key) from e
            return _to_entity(row)

    async def exists_by_email(self, email: str) -> bool:
        return await self._bounded(self._exists_by_email(email))

    async def _exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(UserModel.email == email))
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return bool(result.scalar())
