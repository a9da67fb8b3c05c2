"""Common API and transport envelope schemas."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Consistent JSON envelope for API responses."""

    data: T


class TransportReply(BaseModel):
    """Frame sent back over the transport socket for every inbound frame."""

    type: Literal["ack", "error"]
    event: str | None = None
    detail: Any = Field(default=None)
