"""Shared test fixtures for Roster."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from roster.app import create_app
from roster.store import close_store, open_store, run_migrations

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from flask import Flask
    from flask.testing import FlaskClient
    from sqlalchemy import Engine


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    """A migrated store in a per-test temporary file."""
    engine = open_store(tmp_path / "test.db")
    run_migrations(engine)
    yield engine
    close_store(engine)


@pytest.fixture
def app(engine: Engine) -> Flask:
    app = create_app(engine)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()
