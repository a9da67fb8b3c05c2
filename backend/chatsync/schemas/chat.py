"""Schemas for conversation state endpoints."""

from pydantic import BaseModel, Field, field_validator

from chatsync.schemas.message import ChatMessage
from chatsync.schemas.typing_status import TypingStatus


class SendMessageRequest(BaseModel):
    """Request payload for sending one user message."""

    content: str = Field(min_length=1)
    include_files: bool = True

    @field_validator("content")
    @classmethod
    def _strip_content(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Message content cannot be blank.")
        return stripped


class ConversationSnapshot(BaseModel):
    """Read model of one conversation for rendering."""

    project_id: str
    agent_id: str
    messages: list[ChatMessage]
    typing_users: list[TypingStatus]
    is_loading: bool
    is_connected: bool


class ConnectionStatus(BaseModel):
    """Transport connectivity flag."""

    connected: bool


class CommandResult(BaseModel):
    """Outcome of an outbound transport command."""

    event: str
    delivered: int
