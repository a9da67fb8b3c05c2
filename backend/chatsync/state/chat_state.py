"""Composition of all live chat state owned by one application instance."""

from __future__ import annotations

from chatsync.schemas.chat import ConversationSnapshot
from chatsync.state.message_store import MessageStore
from chatsync.state.types import ConversationKey
from chatsync.state.typing_tracker import TypingTracker


class ChatState:
    """Message lists, typing indicators, connectivity and send-in-flight flags.

    The three kinds of state are independent and only share the conversation
    key. Loading flags are advisory: nothing here blocks a second send for a
    key whose flag is already set.
    """

    def __init__(
        self,
        messages: MessageStore | None = None,
        typing: TypingTracker | None = None,
    ) -> None:
        self.messages = messages or MessageStore()
        self.typing = typing or TypingTracker()
        self.connected = False
        self._loading: dict[ConversationKey, bool] = {}

    def set_connected(self, connected: bool) -> None:
        self.connected = connected

    def set_loading(self, key: ConversationKey, loading: bool) -> None:
        self._loading[key] = loading

    def is_loading(self, key: ConversationKey) -> bool:
        return self._loading.get(key, False)

    def snapshot(self, key: ConversationKey) -> ConversationSnapshot:
        """Return everything the UI needs to render one conversation."""

        return ConversationSnapshot(
            project_id=key.project_id,
            agent_id=key.agent_id,
            messages=self.messages.messages(key),
            typing_users=self.typing.typing_users(key.project_id),
            is_loading=self.is_loading(key),
            is_connected=self.connected,
        )
