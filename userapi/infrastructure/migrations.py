"""Migration Runner — applies the packaged Alembic scripts at startup.

Invariants:
    - Forward-only: the runner only ever upgrades to "head"
    - Scripts ship inside the package (userapi/migrations), never read from the CWD
    - The upgrade runs on a connection borrowed from the application engine,
      inside a single transaction
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def build_alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


def _upgrade(connection: Connection, cfg: Config) -> None:
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def run_migrations(engine: AsyncEngine) -> None:
    """Upgrade the schema behind `engine` to the latest revision."""
    cfg = build_alembic_config()
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade, cfg)
    logger.info("Database migrations applied")
