"""Real-time transport: inbound events into chat state, outbound commands to open sockets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import ValidationError

from chatsync.schemas.events import MessageHistoryEvent, NewMessageEvent, TransportCommand, TypingUpdateEvent
from chatsync.schemas.typing_status import TypingStatus
from chatsync.state.chat_state import ChatState
from chatsync.state.types import ConversationKey

logger = logging.getLogger(__name__)


class TransportEventError(ValueError):
    """Raised for unknown event names or payloads that fail validation."""


class TransportEventHandler:
    """Maps socket event names onto :class:`ChatState` mutations."""

    def __init__(self, state: ChatState) -> None:
        self.state = state
        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "connect": self._on_connect,
            "disconnect": self._on_disconnect,
            "connect_error": self._on_connect_error,
            "new-message": self._on_new_message,
            "message-history": self._on_message_history,
            "typing-update": self._on_typing_update,
            "error": self._on_error,
            "project-joined": self._on_project_joined,
            "project-left": self._on_project_left,
        }

    @property
    def events(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, event: str, payload: dict[str, Any] | None = None) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            raise TransportEventError(f"Unknown transport event: {event}")
        try:
            handler(payload or {})
        except ValidationError as exc:
            raise TransportEventError(f"Invalid payload for {event}: {exc.error_count()} error(s)") from exc

    def _on_connect(self, payload: dict[str, Any]) -> None:
        logger.info("transport.connected")
        self.state.set_connected(True)

    def _on_disconnect(self, payload: dict[str, Any]) -> None:
        logger.info("transport.disconnected reason=%s", payload.get("reason", "unknown"))
        self.state.set_connected(False)

    def _on_connect_error(self, payload: dict[str, Any]) -> None:
        logger.error("transport.connect_error detail=%s", payload.get("message", payload))
        self.state.set_connected(False)

    def _on_new_message(self, payload: dict[str, Any]) -> None:
        event = NewMessageEvent.model_validate(payload)
        key = ConversationKey(event.project_id, event.agent_id)
        self.state.messages.append(key, event.message)

    def _on_message_history(self, payload: dict[str, Any]) -> None:
        event = MessageHistoryEvent.model_validate(payload)
        key = ConversationKey(event.project_id, event.agent_id)
        self.state.messages.replace_all(key, event.messages)

    def _on_typing_update(self, payload: dict[str, Any]) -> None:
        event = TypingUpdateEvent.model_validate(payload)
        if event.is_typing:
            self.state.typing.upsert(
                event.project_id,
                TypingStatus(user_id=event.user_id, project_id=event.project_id, is_typing=True),
            )
        else:
            self.state.typing.remove(event.project_id, event.user_id)

    def _on_error(self, payload: dict[str, Any]) -> None:
        logger.error(
            "transport.error message=%s type=%s",
            payload.get("message", "Unknown error"),
            payload.get("type", "Unknown type"),
        )

    def _on_project_joined(self, payload: dict[str, Any]) -> None:
        logger.info("transport.project_joined project_id=%s", payload.get("projectId"))

    def _on_project_left(self, payload: dict[str, Any]) -> None:
        logger.info("transport.project_left project_id=%s", payload.get("projectId"))


class TransportPeer(Protocol):
    """Open socket that outbound command frames are written to."""

    async def send_text(self, data: str) -> None:
        """Send one text frame."""


OUTBOUND_COMMANDS = frozenset({"join-project", "leave-project", "typing-start", "typing-stop"})


class TransportHub:
    """Tracks open transport sockets and fans outbound commands out to them.

    The shared connectivity flag follows the number of open sockets: the
    first open dispatches ``connect`` and the last close dispatches
    ``disconnect``.
    """

    def __init__(self, handler: TransportEventHandler) -> None:
        self.handler = handler
        self._open = 0
        self._peers: list[TransportPeer] = []

    @property
    def open_connections(self) -> int:
        return self._open

    def connection_opened(self) -> None:
        self._open += 1
        if self._open == 1:
            self.handler.dispatch("connect")

    def connection_closed(self, reason: str) -> None:
        self._open = max(0, self._open - 1)
        if self._open == 0:
            self.handler.dispatch("disconnect", {"reason": reason})

    def add_peer(self, peer: TransportPeer) -> None:
        self._peers.append(peer)

    def discard_peer(self, peer: TransportPeer) -> None:
        if peer in self._peers:
            self._peers.remove(peer)

    async def emit(self, event: str, data: dict[str, Any]) -> int:
        """Send ``event`` to every ready socket and return how many received it.

        With no socket open the command is dropped and 0 is returned.
        """

        if event not in OUTBOUND_COMMANDS:
            raise TransportEventError(f"Unknown transport command: {event}")
        frame = TransportCommand(event=event, data=data).model_dump_json()
        delivered = 0
        for peer in list(self._peers):
            try:
                await peer.send_text(frame)
            except RuntimeError:
                # Socket closed between the peer list snapshot and the send.
                logger.warning("transport.command_dropped event=%s", event)
                self.discard_peer(peer)
                continue
            delivered += 1
        logger.info("transport.command event=%s delivered=%d", event, delivered)
        return delivered
