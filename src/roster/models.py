"""Request and response models for the Roster HTTP API."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_REQUIRED_MESSAGE = "Name is required and must be a non-empty string"
INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class UserCreate(BaseModel):
    """Body of a create-user request.

    Strict mode rejects non-string names instead of coercing them, and the
    name is trimmed before the length check so whitespace-only names fail.
    """

    model_config = ConfigDict(strict=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, description="Display name, trimmed.")


class User(BaseModel):
    """A persisted user as returned by the API."""

    id: int
    name: str
    created_at: datetime = Field(description="Assigned by the store at insert time.")

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """SQLite CURRENT_TIMESTAMP is UTC but comes back naive."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class ErrorResponse(BaseModel):
    """JSON error body.

    ``details`` is only set for internal errors and carries the raw error text.
    """

    error: str
    details: str | None = None
