"""State keys shared by the chat state containers."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConversationKey:
    """Identity of one project/agent conversation."""

    project_id: str
    agent_id: str
