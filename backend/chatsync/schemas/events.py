"""Inbound real-time transport payloads."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from chatsync.schemas.message import ChatMessage


class _EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NewMessageEvent(_EventPayload):
    """A single message delivered live for one conversation."""

    project_id: str = Field(alias="projectId", min_length=1)
    agent_id: str = Field(alias="agentId", min_length=1)
    message: ChatMessage


class MessageHistoryEvent(_EventPayload):
    """Authoritative history snapshot for one conversation."""

    project_id: str = Field(alias="projectId", min_length=1)
    agent_id: str = Field(alias="agentId", min_length=1)
    messages: list[ChatMessage] = Field(default_factory=list)


class TypingUpdateEvent(_EventPayload):
    """Typing state change pushed for a project."""

    project_id: str = Field(alias="projectId", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    is_typing: bool = Field(alias="isTyping")


class TransportFrame(BaseModel):
    """Envelope of one JSON frame received on the transport socket."""

    event: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class TransportCommand(BaseModel):
    """Frame pushed to every open transport socket for an outbound command."""

    type: Literal["command"] = "command"
    event: str
    data: dict[str, Any] = Field(default_factory=dict)
