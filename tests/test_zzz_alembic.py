"""Alembic migration tests.

File named test_zzz_alembic.py to sort LAST in pytest collection order.
Each run migrates its own SQLite file through a subprocess, so the test
database used by the API tests is never touched.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from audiotour.db import models  # noqa: F401  (registers tables on Base.metadata)
from audiotour.db.base import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]
HEAD_REVISION = "001_initial_schema"


@pytest.fixture(scope="module")
def migration_db(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("alembic") / "migrated.db"


def _alembic(db_path: Path, *args: str) -> subprocess.CompletedProcess:
    env = {**os.environ, "AUDIOTOUR_DATABASE_URL": f"sqlite+aiosqlite:///{db_path}"}
    return subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
    )


def test_alembic_upgrade_head(migration_db: Path) -> None:
    """alembic upgrade head succeeds without errors."""
    result = _alembic(migration_db, "upgrade", "head")
    assert result.returncode == 0, f"alembic upgrade failed: {result.stderr}"


def test_alembic_current_shows_head(migration_db: Path) -> None:
    """alembic current shows the latest revision."""
    result = _alembic(migration_db, "current")
    assert result.returncode == 0, result.stderr
    assert HEAD_REVISION in result.stdout


def test_migrated_schema_matches_models(migration_db: Path) -> None:
    """alembic check finds nothing to autogenerate against the ORM models."""
    result = _alembic(migration_db, "check")
    assert result.returncode == 0, f"models and migrations differ: {result.stdout}{result.stderr}"


def test_migrated_constraints(migration_db: Path) -> None:
    engine = create_engine(f"sqlite:///{migration_db}")
    try:
        inspector = inspect(engine)
        assert set(Base.metadata.tables) <= set(inspector.get_table_names())

        user_uniques = {uc["name"] for uc in inspector.get_unique_constraints("users")}
        assert "users_email_key" in user_uniques

        for table in ("user_favorites", "user_progress"):
            uniques = {
                uc["name"]: uc["column_names"] for uc in inspector.get_unique_constraints(table)
            }
            assert uniques[f"{table}_user_location_key"] == ["user_id", "location_id"]

            fks = inspector.get_foreign_keys(table)
            assert {fk["referred_table"] for fk in fks} == {"users", "locations"}
            assert all(fk["options"].get("ondelete") == "CASCADE" for fk in fks)

        (created_by,) = inspector.get_foreign_keys("locations")
        assert created_by["options"].get("ondelete") == "SET NULL"
    finally:
        engine.dispose()


def test_alembic_downgrade_base(migration_db: Path) -> None:
    """Downgrading to base drops every table the migration created."""
    result = _alembic(migration_db, "downgrade", "base")
    assert result.returncode == 0, f"alembic downgrade failed: {result.stderr}"

    engine = create_engine(f"sqlite:///{migration_db}")
    try:
        remaining = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert remaining.isdisjoint(Base.metadata.tables)
