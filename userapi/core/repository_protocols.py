"""Boundary Protocols — contracts between the service and storage.

Invariants:
    - Service NEVER imports from infrastructure — dependency arrows point inward only
    - Implementations raise NotFoundError / DuplicateKeyError for the conditions
      they recognise and let every other failure propagate unchanged

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
"""

from typing import Protocol

from userapi.core.domain_types import User, UserId


class UserRepository(Protocol):
    """Contract for user persistence — implemented by infrastructure."""
    async def create(self, user: User) -> User: ...
    async def get_by_id(self, user_id: UserId) -> User: ...
    async def get_by_email(self, email: str) -> User: ...
    async def exists_by_email(self, email: str) -> bool: ...
    async def update(self, user: User) -> User: ...
    async def delete(self, user_id: UserId) -> None: ...
