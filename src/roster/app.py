"""Flask application factory for Roster."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from flask import Flask, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import InternalServerError

from roster.api import ENGINE_EXTENSION_KEY, api, error_response
from roster.models import INTERNAL_ERROR_MESSAGE

if TYPE_CHECKING:
    from flask import Response
    from sqlalchemy import Engine

STATIC_DIR = Path(__file__).parent / "static"


def create_app(engine: Engine) -> Flask:
    """Build the application around an already-opened store engine.

    The engine is owned by the caller, which also runs migrations and
    disposes of it at exit.
    """
    app = Flask(__name__, static_folder=None)
    app.extensions[ENGINE_EXTENSION_KEY] = engine
    CORS(app, resources={r"/api/*": {"origins": "*"}}, send_wildcard=True)

    app.register_blueprint(api)

    @app.get("/")
    def index() -> Response:
        """Single-page client view."""
        return send_from_directory(STATIC_DIR, "index.html")

    @app.errorhandler(InternalServerError)
    def handle_internal_error(e: InternalServerError) -> tuple[Response, int]:
        original = e.original_exception
        details = str(original) if original is not None else e.description
        return error_response(INTERNAL_ERROR_MESSAGE, 500, details)

    return app
