"""Per-conversation message lists kept in timestamp order."""

from __future__ import annotations

import logging
import uuid
from bisect import bisect_left
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from chatsync.schemas.message import ChatMessage, MessagePatch
from chatsync.state.types import ConversationKey

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageStore:
    """In-memory message lists keyed by conversation.

    Lists are created lazily; an unknown key reads as an empty list. Every
    ``append`` keeps the list non-decreasing by ``timestamp`` even when
    messages arrive out of order. ``replace_all`` installs a history snapshot
    as given.
    """

    def __init__(
        self,
        *,
        temp_id_prefix: str = "temp-",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._lists: dict[ConversationKey, list[ChatMessage]] = {}
        self._temp_id_prefix = temp_id_prefix
        self._clock = clock

    def messages(self, key: ConversationKey) -> list[ChatMessage]:
        """Return a copy of the ordered list for ``key``."""

        return list(self._lists.get(key, ()))

    def keys(self) -> list[ConversationKey]:
        return list(self._lists)

    def append(self, key: ConversationKey, message: ChatMessage) -> int:
        """Insert ``message`` at its timestamp position and return the index used."""

        return self._place(key, message.model_copy(update={"is_loading": False}))

    def replace_all(self, key: ConversationKey, messages: Iterable[ChatMessage]) -> None:
        """Install a history snapshot; the caller supplies it already ordered."""

        self._lists[key] = [message.model_copy(update={"is_loading": False}) for message in messages]

    def update(
        self,
        key: ConversationKey,
        message_id: str,
        patch: MessagePatch | None = None,
        **fields: Any,
    ) -> bool:
        """Merge ``patch`` (or keyword ``fields``) into the message with ``message_id``.

        The message keeps its position even if ``timestamp`` changes. Returns
        False when the key or id is unknown, or when the patch names an unknown
        field or would leave the message invalid; the stored message is then
        left as it was.
        """

        items = self._lists.get(key)
        if not items:
            return False
        for index, current in enumerate(items):
            if current.id != message_id:
                continue
            try:
                changes = patch.model_dump(exclude_unset=True) if patch is not None else {}
                changes.update(MessagePatch.model_validate(fields).model_dump(exclude_unset=True))
                items[index] = ChatMessage.model_validate({**current.model_dump(), **changes})
            except ValidationError as exc:
                logger.warning(
                    "message_store.update_rejected project_id=%s agent_id=%s message_id=%s errors=%d",
                    key.project_id,
                    key.agent_id,
                    message_id,
                    exc.error_count(),
                )
                return False
            return True
        return False

    def remove(self, key: ConversationKey, message_id: str) -> bool:
        items = self._lists.get(key)
        if not items:
            return False
        kept = [item for item in items if item.id != message_id]
        self._lists[key] = kept
        return len(kept) != len(items)

    def add_optimistic(self, key: ConversationKey, content: str) -> str:
        """Insert a pending user message in timestamp order and return its temporary id."""

        temp_id = f"{self._temp_id_prefix}{uuid.uuid4().hex}"
        pending = ChatMessage(
            id=temp_id,
            role="user",
            content=content,
            timestamp=self._clock(),
            is_loading=True,
        )
        self._place(key, pending)
        return temp_id

    def clear(self, key: ConversationKey) -> None:
        self._lists[key] = []

    def _place(self, key: ConversationKey, message: ChatMessage) -> int:
        items = self._lists.setdefault(key, [])
        if not items or message.timestamp >= items[-1].timestamp:
            items.append(message)
            return len(items) - 1

        index = bisect_left(items, message.timestamp, key=lambda item: item.timestamp)
        items.insert(index, message)
        return index
