"""Chat message schemas."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive and aware datetimes cannot be compared; treat naive input as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MessageMetadata(BaseModel):
    """Provider bookkeeping attached to a message by the server."""

    model_config = ConfigDict(extra="allow")

    files: list[str] | None = None
    tokens: int | None = None
    model: str | None = None
    processing_time: float | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    estimated_cost: float | None = None


class ChatMessage(BaseModel):
    """One chat turn as held in client state."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    created_at: datetime | None = None
    is_loading: bool = Field(default=False, alias="isLoading")
    error: str | None = None
    metadata: MessageMetadata | None = None

    @field_validator("timestamp", "created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class MessagePatch(BaseModel):
    """Partial message fields merged by ``MessageStore.update``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str | None = None
    role: Literal["user", "assistant"] | None = None
    content: str | None = None
    timestamp: datetime | None = None
    created_at: datetime | None = None
    is_loading: bool | None = Field(default=None, alias="isLoading")
    error: str | None = None
    metadata: MessageMetadata | None = None

    @field_validator("timestamp", "created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)
