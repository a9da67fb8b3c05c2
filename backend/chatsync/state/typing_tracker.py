"""Per-project typing indicators."""

from __future__ import annotations

from collections.abc import Iterable

from chatsync.schemas.typing_status import TypingStatus


class TypingTracker:
    """Users currently composing a message, grouped by project.

    Holds at most one entry per ``(project_id, user_id)`` and never keeps an
    entry whose ``is_typing`` is False.
    """

    def __init__(self) -> None:
        self._by_project: dict[str, list[TypingStatus]] = {}

    def typing_users(self, project_id: str) -> list[TypingStatus]:
        return list(self._by_project.get(project_id, ()))

    def set_all(self, project_id: str, statuses: Iterable[TypingStatus]) -> None:
        latest: dict[str, TypingStatus] = {}
        for status in statuses:
            latest[status.user_id] = status
        self._by_project[project_id] = [status for status in latest.values() if status.is_typing]

    def upsert(self, project_id: str, status: TypingStatus) -> None:
        """Record ``status``, replacing the user's previous entry in place."""

        current = self._by_project.get(project_id, [])
        updated = list(current)
        for index, existing in enumerate(current):
            if existing.user_id == status.user_id:
                updated[index] = status
                break
        else:
            updated.append(status)
        self._by_project[project_id] = [entry for entry in updated if entry.is_typing]

    def remove(self, project_id: str, user_id: str) -> None:
        current = self._by_project.get(project_id)
        if current is None:
            return
        self._by_project[project_id] = [entry for entry in current if entry.user_id != user_id]
