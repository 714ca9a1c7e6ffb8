"""ORM Models — SQLAlchemy declarative models.

Imported here so Base.metadata is populated for Alembic and test fixtures.
"""

from userapi.models.user import UserModel  # noqa: F401
