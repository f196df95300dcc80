"""Tests for schema migration status and upgrades."""
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from family_sns.core.migrations import MigrationStatus, ensure_migrations, get_migration_status


def _fresh_engine():
    return create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )


def test_status_labels():
    assert MigrationStatus(("0001",), ("0001",)).health_label == "up_to_date"
    assert MigrationStatus((), ("0001",)).health_label == "pending"


def test_fresh_database_is_pending_without_auto_migrate():
    engine = _fresh_engine()

    status = ensure_migrations(engine, auto_migrate=False)

    assert status.current_heads == ()
    assert not status.is_up_to_date
    assert "posts" not in inspect(engine).get_table_names()


def test_auto_migrate_upgrades_to_head():
    engine = _fresh_engine()

    status = ensure_migrations(engine, auto_migrate=True)

    assert status.is_up_to_date
    assert get_migration_status(engine).current_heads == status.head_revisions
    tables = set(inspect(engine).get_table_names())
    assert {"families", "users", "posts", "likes", "comments", "messages", "notifications"} <= tables
