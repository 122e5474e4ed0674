"""HTTP handlers for the ``/api/users`` resource.

Every handler returns a JSON body with an explicit status code; data-access
errors are logged here and never propagate past the handler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from roster.models import (
    INTERNAL_ERROR_MESSAGE,
    NAME_REQUIRED_MESSAGE,
    ErrorResponse,
    User,
    UserCreate,
)
from roster.store import StoreError, create_user, list_users

if TYPE_CHECKING:
    from flask import Response
    from sqlalchemy import Engine

ENGINE_EXTENSION_KEY = "roster.engine"

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


def get_store_engine() -> Engine:
    """Return the engine injected into the current application."""
    return current_app.extensions[ENGINE_EXTENSION_KEY]


def error_response(
    message: str, status: int, details: str | None = None
) -> tuple[Response, int]:
    body = ErrorResponse(error=message, details=details)
    return jsonify(body.model_dump(exclude_none=True)), status


@api.get("/users")
def get_users() -> tuple[Response, int]:
    try:
        rows = list_users(get_store_engine())
    except (SQLAlchemyError, StoreError) as e:
        logger.exception("Error fetching users")
        return error_response(INTERNAL_ERROR_MESSAGE, 500, str(e))

    users = [User.model_validate(row).model_dump(mode="json") for row in rows]
    return jsonify(users), 200


@api.post("/users")
def post_user() -> tuple[Response, int]:
    try:
        payload = UserCreate.model_validate(request.get_json(force=True, silent=True))
    except ValidationError:
        return error_response(NAME_REQUIRED_MESSAGE, 400)

    try:
        row = create_user(get_store_engine(), payload.name)
    except (SQLAlchemyError, StoreError) as e:
        logger.exception("Error creating user")
        return error_response(INTERNAL_ERROR_MESSAGE, 500, str(e))

    logger.info("Created user %d", row["id"])
    return jsonify(User.model_validate(row).model_dump(mode="json")), 201
