"""Tests for per-project typing indicators."""

from __future__ import annotations

import unittest

from chatsync.schemas.typing_status import TypingStatus
from chatsync.state.typing_tracker import TypingTracker


def _status(user_id: str, is_typing: bool = True, project_id: str = "p1") -> TypingStatus:
    return TypingStatus(user_id=user_id, project_id=project_id, is_typing=is_typing)


class TypingTrackerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = TypingTracker()

    def test_upsert_twice_keeps_one_entry(self) -> None:
        self.tracker.upsert("p1", _status("u1"))
        self.tracker.upsert("p1", _status("u1"))
        self.assertEqual([s.user_id for s in self.tracker.typing_users("p1")], ["u1"])

    def test_upsert_stopped_typing_removes_user(self) -> None:
        self.tracker.upsert("p1", _status("u1"))
        self.tracker.upsert("p1", _status("u1", is_typing=False))
        self.assertEqual(self.tracker.typing_users("p1"), [])

    def test_upsert_replaces_in_place(self) -> None:
        for user_id in ("u1", "u2", "u3"):
            self.tracker.upsert("p1", _status(user_id))
        self.tracker.upsert("p1", _status("u2"))
        self.assertEqual([s.user_id for s in self.tracker.typing_users("p1")], ["u1", "u2", "u3"])

    def test_stopped_status_for_unknown_user_is_not_kept(self) -> None:
        self.tracker.upsert("p1", _status("u1", is_typing=False))
        self.assertEqual(self.tracker.typing_users("p1"), [])

    def test_set_all_replaces_and_drops_non_typing(self) -> None:
        self.tracker.upsert("p1", _status("old"))
        self.tracker.set_all("p1", [_status("u1"), _status("u2", is_typing=False), _status("u1")])
        self.assertEqual([s.user_id for s in self.tracker.typing_users("p1")], ["u1"])

    def test_remove_user(self) -> None:
        self.tracker.upsert("p1", _status("u1"))
        self.tracker.upsert("p1", _status("u2"))
        self.tracker.remove("p1", "u1")
        self.tracker.remove("unknown", "u1")
        self.assertEqual([s.user_id for s in self.tracker.typing_users("p1")], ["u2"])

    def test_projects_are_independent(self) -> None:
        self.tracker.upsert("p1", _status("u1"))
        self.tracker.upsert("p2", _status("u1", project_id="p2"))
        self.tracker.remove("p1", "u1")
        self.assertEqual(self.tracker.typing_users("p1"), [])
        self.assertEqual(len(self.tracker.typing_users("p2")), 1)


if __name__ == "__main__":
    unittest.main()
