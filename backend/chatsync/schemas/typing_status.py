"""Typing indicator schema."""

from pydantic import BaseModel, ConfigDict, Field


class TypingStatus(BaseModel):
    """Latest known typing state of one user in one project."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    project_id: str = Field(alias="projectId")
    is_typing: bool = Field(alias="isTyping")
