"""Send, history and clear flows that bridge the API and local chat state."""

from __future__ import annotations

import logging

from chatsync.services.conversations_client import ConversationsClient, ConversationsClientError
from chatsync.state.chat_state import ChatState
from chatsync.state.types import ConversationKey

logger = logging.getLogger(__name__)


class ChatSendError(RuntimeError):
    """Raised when a message could not be delivered to the conversations API."""

    def __init__(self, message: str, *, temp_id: str | None = None) -> None:
        super().__init__(message)
        self.temp_id = temp_id


class ChatService:
    """Runs outbound conversation calls against one :class:`ChatState`."""

    def __init__(self, state: ChatState, client: ConversationsClient) -> None:
        self.state = state
        self.client = client

    def send_message(self, key: ConversationKey, content: str, *, include_files: bool = True) -> str:
        """Show ``content`` optimistically, send it, and reconcile with the reply.

        On success the server's history replaces the local list. On failure
        the optimistic message stays visible with ``error`` set; client errors
        are re-raised as :class:`ChatSendError`, anything else unchanged. The
        loading flag for ``key`` is cleared either way. Blank ``content`` raises
        ``ValueError`` before any state changes. Returns the temporary id of the optimistic message.
        """

        trimmed = content.strip()
        if not trimmed:
            raise ValueError("Message content cannot be empty.")

        self.state.set_loading(key, True)
        try:
            temp_id = self.state.messages.add_optimistic(key, trimmed)
            try:
                history = self.client.send_message(key, trimmed, include_files=include_files)
            except Exception as exc:
                reason = str(exc) or "Failed to send message"
                self.state.messages.update(key, temp_id, error=reason, is_loading=False)
                logger.warning(
                    "chat.send_failed project_id=%s agent_id=%s temp_id=%s error=%s",
                    key.project_id,
                    key.agent_id,
                    temp_id,
                    reason,
                )
                if isinstance(exc, ConversationsClientError):
                    raise ChatSendError(reason, temp_id=temp_id) from exc
                raise
            self.state.messages.replace_all(key, history)
            logger.info(
                "chat.send_succeeded project_id=%s agent_id=%s messages=%d",
                key.project_id,
                key.agent_id,
                len(history),
            )
            return temp_id
        finally:
            self.state.set_loading(key, False)

    def load_history(self, key: ConversationKey) -> int:
        """Replace the local list with the stored history and return its length."""

        history = self.client.get_conversation(key)
        self.state.messages.replace_all(key, history)
        return len(history)

    def clear_conversation(self, key: ConversationKey) -> None:
        self.client.clear_conversation(key)
        self.state.messages.clear(key)
        logger.info("chat.cleared project_id=%s agent_id=%s", key.project_id, key.agent_id)
