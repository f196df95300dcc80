"""Schema migrations: head checks for /health and opt-in upgrades on boot."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from family_sns.core.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
VERSION_TABLE = "alembic_version"
# Any constant works as long as every family-sns process agrees on it
UPGRADE_LOCK_KEY = 4417203


class MigrationError(RuntimeError):
    """Raised when an automatic upgrade leaves the schema short of head."""


@dataclass(frozen=True)
class MigrationStatus:
    current_heads: tuple[str, ...]
    head_revisions: tuple[str, ...]

    @property
    def is_up_to_date(self) -> bool:
        return set(self.current_heads) == set(self.head_revisions)

    @property
    def health_label(self) -> str:
        return "up_to_date" if self.is_up_to_date else "pending"


def get_alembic_config() -> Config:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.is_file():
        raise FileNotFoundError(f"Alembic config not found at {ini_path}")
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    return config


def _applied_heads(connection: Connection) -> tuple[str, ...]:
    # A fresh database has no version table until the first upgrade
    if VERSION_TABLE not in inspect(connection).get_table_names():
        return ()
    return tuple(MigrationContext.configure(connection).get_current_heads() or ())


def get_migration_status(engine: Engine) -> MigrationStatus:
    script = ScriptDirectory.from_config(get_alembic_config())
    with engine.connect() as connection:
        applied = _applied_heads(connection)
    return MigrationStatus(
        current_heads=applied,
        head_revisions=tuple(script.get_heads() or ()),
    )


def ensure_migrations(engine: Engine, auto_migrate: bool) -> MigrationStatus:
    """Report the schema state; upgrade to head first when ``auto_migrate``."""
    status = get_migration_status(engine)
    if status.is_up_to_date:
        return status

    if not auto_migrate:
        logger.warning(
            "Schema at %s but code expects %s; run `family-sns migrate`",
            status.current_heads or "<empty>", status.head_revisions,
        )
        return status

    logger.info("Upgrading schema %s -> %s", status.current_heads or "<empty>", status.head_revisions)
    upgrade_to_head(engine)

    status = get_migration_status(engine)
    if not status.is_up_to_date:
        raise MigrationError(f"Schema still at {status.current_heads} after upgrade")
    return status


@contextmanager
def _upgrade_lock(connection: Connection) -> Iterator[None]:
    """Serialize upgrades across API replicas with a PostgreSQL advisory lock."""
    connection.execute(text("SELECT pg_advisory_lock(:key)"), {"key": UPGRADE_LOCK_KEY})
    connection.commit()
    try:
        yield
    finally:
        try:
            connection.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": UPGRADE_LOCK_KEY})
            connection.commit()
        except Exception:
            logger.warning("Could not release schema upgrade lock", exc_info=True)


def upgrade_to_head(engine: Engine) -> None:
    """Run ``alembic upgrade head`` over a connection from the app engine."""
    config = get_alembic_config()

    if engine.dialect.name != "postgresql":
        # An in-memory SQLite database only exists on the engine's own connection
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return

    with engine.connect() as connection, _upgrade_lock(connection):
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
        connection.commit()
