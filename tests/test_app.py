"""Tests for roster.app — application factory wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING

from roster.api import ENGINE_EXTENSION_KEY
from roster.app import create_app

if TYPE_CHECKING:
    from flask import Flask
    from flask.testing import FlaskClient
    from sqlalchemy import Engine


class TestCreateApp:
    def test_engine_is_injected(self, app: Flask, engine: Engine) -> None:
        assert app.extensions[ENGINE_EXTENSION_KEY] is engine

    def test_separate_apps_use_their_own_engine(self, engine: Engine) -> None:
        other = object()
        first = create_app(engine)
        second = create_app(other)  # type: ignore[arg-type]
        assert first.extensions[ENGINE_EXTENSION_KEY] is engine
        assert second.extensions[ENGINE_EXTENSION_KEY] is other


class TestClientView:
    def test_index_served(self, client: FlaskClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.mimetype == "text/html"
        body = response.get_data(as_text=True)
        assert 'id="create-form"' in body
        assert "/api/users" in body


class TestCors:
    def test_api_allows_cross_origin(self, client: FlaskClient) -> None:
        response = client.get("/api/users", headers={"Origin": "http://example.com"})
        assert response.headers.get("Access-Control-Allow-Origin") == "*"


class TestInternalErrorHandler:
    def test_unhandled_error_is_json(self, engine: Engine) -> None:
        app = create_app(engine)

        @app.get("/explode")
        def explode() -> None:
            msg = "unexpected"
            raise RuntimeError(msg)

        response = app.test_client().get("/explode")
        assert response.status_code == 500
        assert response.get_json() == {
            "error": "Internal Server Error",
            "details": "unexpected",
        }
