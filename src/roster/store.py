"""Data-access layer for Roster.

Persists users (and the reserved items table) to a local SQLite database.

Design follows Function Core / Imperative Shell:
- Pure functions: get_db_path
- Imperative shell: get_engine, open_store, run_migrations, close_store,
  list_users, create_user, count_users
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

DB_PATH_ENV = "ROSTER_DB_PATH"
DEFAULT_DB_PATH = Path("db") / "dev.db"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StoreError(Exception):
    """Base exception for all Roster store operations."""


class StoreUnavailableError(StoreError):
    """The database file could not be opened or created."""


class SchemaInitError(StoreError):
    """Schema migrations could not be applied."""


class UserCreationError(StoreError):
    """An insert succeeded but returned no row."""


# ---------------------------------------------------------------------------
# SQLAlchemy models
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime,
        server_default=sa.func.now(),
    )


class ItemRow(Base):
    """Reserved for future use; no operation reads or writes items yet."""

    __tablename__ = "items"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    user_id: Mapped[int | None] = mapped_column(sa.ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime,
        server_default=sa.func.now(),
    )


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def get_db_path(override: str | Path | None = None) -> Path:
    """Resolve the database path.

    Resolution order:
    1. *override* (e.g. the ``--db-path`` CLI option).
    2. ``ROSTER_DB_PATH`` environment variable, if non-empty.
    3. ``db/dev.db`` relative to the current working directory.

    The result is always absolute.
    """
    if override:
        return Path(override).resolve()

    env_value = os.environ.get(DB_PATH_ENV)
    if env_value:
        return Path(env_value).resolve()

    return DEFAULT_DB_PATH.resolve()


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def get_engine(db_path: Path) -> Engine:
    """Create a SQLAlchemy engine with WAL mode and foreign keys enabled."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = sa.create_engine(f"sqlite:///{db_path}")

    @sa.event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def open_store(db_path: Path) -> Engine:
    """Open (or create) the database file and verify it accepts connections.

    Raises:
        StoreUnavailableError: If the directory or file cannot be created or
            the database cannot be opened.
    """
    try:
        engine = get_engine(db_path)
        with engine.connect() as conn:
            conn.execute(sa.text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        msg = f"Failed to open database at {db_path}: {e}"
        raise StoreUnavailableError(msg) from e

    logger.info("Opened database: %s", db_path)
    return engine


def run_migrations(engine: Engine) -> None:
    """Bring the schema up to date by running Alembic migrations programmatically.

    Safe to call on every start: already-applied revisions are skipped.

    Raises:
        SchemaInitError: If any migration fails.
    """
    from alembic import command
    from alembic.config import Config

    alembic_dir = Path(__file__).parent / "alembic"
    ini_path = alembic_dir / "alembic.ini"

    cfg = Config(str(ini_path))
    cfg.set_main_option("script_location", str(alembic_dir))

    try:
        with engine.begin() as conn:
            cfg.attributes["connection"] = conn
            command.upgrade(cfg, "head")
    except Exception as e:
        msg = f"Failed to initialize database schema: {e}"
        raise SchemaInitError(msg) from e

    logger.info("Database schema initialized")


def close_store(engine: Engine) -> None:
    """Release all pooled connections."""
    engine.dispose()
    logger.info("Database connections closed")


def list_users(engine: Engine) -> list[dict]:
    """Query all users, newest first.

    Rows created within the same second share a timestamp, so the id breaks
    ties to keep insertion order reversed.
    """
    t = UserRow.__table__
    stmt = sa.select(t.c.id, t.c.name, t.c.created_at).order_by(
        t.c.created_at.desc(),
        t.c.id.desc(),
    )

    with engine.connect() as conn:
        rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]


def create_user(engine: Engine, name: str) -> dict:
    """Insert a user and return the stored row in the same statement.

    *name* is bound as a parameter and stored as given; callers trim it.

    Raises:
        UserCreationError: If the insert returned no row.
    """
    t = UserRow.__table__
    stmt = sa.insert(t).values(name=name).returning(t.c.id, t.c.name, t.c.created_at)

    with engine.begin() as conn:
        row = conn.execute(stmt).mappings().first()

    if row is None:
        msg = "Failed to create user or retrieve the created user data."
        raise UserCreationError(msg)
    return dict(row)


def count_users(engine: Engine) -> int:
    """Return the number of stored users."""
    t = UserRow.__table__
    stmt = sa.select(sa.func.count()).select_from(t)

    with engine.connect() as conn:
        return conn.execute(stmt).scalar_one()
