"""Tests for the send/history/clear flows over chat state."""

from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from chatsync.schemas.message import ChatMessage
from chatsync.services.chat import ChatSendError, ChatService
from chatsync.services.conversations_client import ConversationsClientError, HttpConversationsClient
from chatsync.state.chat_state import ChatState
from chatsync.state.types import ConversationKey

KEY = ConversationKey("p1", "a1")
OTHER = ConversationKey("p2", "a2")


def _history(*contents: str) -> list[ChatMessage]:
    return [
        ChatMessage(
            id=f"srv-{idx}",
            role="user" if idx % 2 == 0 else "assistant",
            content=content,
            timestamp=datetime(2026, 3, 1, 12, idx, tzinfo=timezone.utc),
        )
        for idx, content in enumerate(contents)
    ]


class _RaisingResponse:
    def __init__(self, error: Exception | None, *, body: bytes = b"") -> None:
        self.error = error
        self.body = body

    def read(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.body

    def __enter__(self) -> "_RaisingResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


class _StubClient:
    def __init__(self, *, reply: list[ChatMessage] | None = None, error: Exception | None = None) -> None:
        self.reply = reply or []
        self.error = error
        self.sent: list[tuple[ConversationKey, str, bool]] = []
        self.cleared: list[ConversationKey] = []
        self.loading_during_call: list[bool] = []
        self.state: ChatState | None = None

    def get_conversation(self, key: ConversationKey) -> list[ChatMessage]:
        if self.error:
            raise self.error
        return self.reply

    def send_message(self, key: ConversationKey, content: str, *, include_files: bool = True) -> list[ChatMessage]:
        self.sent.append((key, content, include_files))
        if self.state is not None:
            self.loading_during_call.append(self.state.is_loading(key))
        if self.error:
            raise self.error
        return self.reply

    def clear_conversation(self, key: ConversationKey) -> None:
        if self.error:
            raise self.error
        self.cleared.append(key)


class ChatServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = ChatState()

    def _service(self, client: _StubClient) -> ChatService:
        client.state = self.state
        return ChatService(self.state, client)

    def test_successful_send_replaces_history(self) -> None:
        client = _StubClient(reply=_history("hello", "hi there"))
        service = self._service(client)

        temp_id = service.send_message(KEY, "  hello  ", include_files=False)

        self.assertTrue(temp_id.startswith("temp-"))
        self.assertEqual(client.sent, [(KEY, "hello", False)])
        self.assertEqual(client.loading_during_call, [True])
        self.assertEqual([m.id for m in self.state.messages.messages(KEY)], ["srv-0", "srv-1"])
        self.assertFalse(self.state.is_loading(KEY))

    def test_failed_send_keeps_optimistic_message_with_error(self) -> None:
        client = _StubClient(error=ConversationsClientError("upstream unavailable"))
        service = self._service(client)

        with self.assertRaises(ChatSendError) as ctx:
            service.send_message(KEY, "hello")

        stored = self.state.messages.messages(KEY)
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0].id, ctx.exception.temp_id)
        self.assertEqual(stored[0].content, "hello")
        self.assertEqual(stored[0].error, "upstream unavailable")
        self.assertFalse(stored[0].is_loading)
        self.assertFalse(self.state.is_loading(KEY))

    def test_loading_flag_settles_after_unexpected_error(self) -> None:
        client = _StubClient(error=RuntimeError("boom"))
        service = self._service(client)

        with self.assertRaisesRegex(RuntimeError, "boom") as ctx:
            service.send_message(KEY, "hello")

        self.assertNotIsInstance(ctx.exception, ChatSendError)
        self.assertEqual(client.loading_during_call, [True])
        self.assertFalse(self.state.is_loading(KEY))
        stored = self.state.messages.messages(KEY)
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0].content, "hello")
        self.assertEqual(stored[0].error, "boom")
        self.assertFalse(stored[0].is_loading)

    def test_http_client_failures_annotate_the_optimistic_message(self) -> None:
        failures = {
            "timeout": _RaisingResponse(TimeoutError("timed out")),
            "bad utf-8": _RaisingResponse(None, body=b"\xff\xfe\xfa"),
        }
        for label, response in failures.items():
            with self.subTest(label):
                state = ChatState()
                service = ChatService(state, HttpConversationsClient(base_url="http://api.test"))
                with patch("urllib.request.urlopen", return_value=response):
                    with self.assertRaises(ChatSendError):
                        service.send_message(KEY, "hello")

                stored = state.messages.messages(KEY)
                self.assertEqual(len(stored), 1)
                self.assertIsNotNone(stored[0].error)
                self.assertFalse(stored[0].is_loading)
                self.assertFalse(state.is_loading(KEY))

    def test_empty_content_is_rejected_before_state_changes(self) -> None:
        client = _StubClient()
        service = self._service(client)

        with self.assertRaises(ValueError):
            service.send_message(KEY, "   ")

        self.assertEqual(client.sent, [])
        self.assertEqual(self.state.messages.messages(KEY), [])
        self.assertFalse(self.state.is_loading(KEY))

    def test_send_leaves_other_keys_untouched(self) -> None:
        self.state.messages.replace_all(OTHER, _history("keep me"))
        self.state.set_loading(OTHER, True)
        service = self._service(_StubClient(error=ConversationsClientError("down")))

        with self.assertRaises(ChatSendError):
            service.send_message(KEY, "hello")

        self.assertEqual([m.content for m in self.state.messages.messages(OTHER)], ["keep me"])
        self.assertTrue(self.state.is_loading(OTHER))

    def test_load_history_replaces_list(self) -> None:
        self.state.messages.add_optimistic(KEY, "stale")
        service = self._service(_StubClient(reply=_history("a", "b", "c")))

        count = service.load_history(KEY)

        self.assertEqual(count, 3)
        self.assertEqual([m.content for m in self.state.messages.messages(KEY)], ["a", "b", "c"])

    def test_load_history_error_leaves_state(self) -> None:
        self.state.messages.replace_all(KEY, _history("a"))
        service = self._service(_StubClient(error=ConversationsClientError("down")))

        with self.assertRaises(ConversationsClientError):
            service.load_history(KEY)

        self.assertEqual([m.content for m in self.state.messages.messages(KEY)], ["a"])

    def test_clear_conversation_clears_remote_then_local(self) -> None:
        self.state.messages.replace_all(KEY, _history("a"))
        client = _StubClient()
        service = self._service(client)

        service.clear_conversation(KEY)

        self.assertEqual(client.cleared, [KEY])
        self.assertEqual(self.state.messages.messages(KEY), [])


if __name__ == "__main__":
    unittest.main()
