"""Client for the request/response conversations API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http import client as http_client
from time import perf_counter
from typing import Any, Protocol
from urllib import error as urllib_error
from urllib import parse as urllib_parse
from urllib import request as urllib_request

from pydantic import ValidationError

from chatsync.config import Settings, get_settings
from chatsync.schemas.message import ChatMessage
from chatsync.state.types import ConversationKey

logger = logging.getLogger(__name__)


class ConversationsClientError(RuntimeError):
    """Raised when the conversations API call fails or answers unexpectedly."""


class ConversationsClient(Protocol):
    """Protocol for the authoritative conversation backend."""

    def get_conversation(self, key: ConversationKey) -> list[ChatMessage]:
        """Return the stored history of a conversation."""

    def send_message(self, key: ConversationKey, content: str, *, include_files: bool = True) -> list[ChatMessage]:
        """Submit a user message and return the updated conversation history."""

    def clear_conversation(self, key: ConversationKey) -> None:
        """Delete the stored history of a conversation."""


@dataclass(slots=True)
class HttpConversationsClient:
    """JSON-over-HTTP implementation of :class:`ConversationsClient`."""

    base_url: str
    token: str | None = None
    timeout_seconds: int = 60

    def get_conversation(self, key: ConversationKey) -> list[ChatMessage]:
        body = self._request("GET", f"/conversations/{_quote(key.project_id)}/{_quote(key.agent_id)}")
        return _conversation_messages(body)

    def send_message(self, key: ConversationKey, content: str, *, include_files: bool = True) -> list[ChatMessage]:
        body = self._request(
            "POST",
            f"/projects/{_quote(key.project_id)}/agents/{_quote(key.agent_id)}/chat",
            payload={"message": content, "includeFiles": include_files},
        )
        return _conversation_messages(body)

    def clear_conversation(self, key: ConversationKey) -> None:
        self._request("DELETE", f"/conversations/{_quote(key.project_id)}/{_quote(key.agent_id)}")

    def _request(self, method: str, path: str, *, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}{path}"
        headers = {"Accept": "application/json"}
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        req = urllib_request.Request(url=url, data=data, method=method, headers=headers)

        started = perf_counter()
        try:
            with urllib_request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise ConversationsClientError(f"Conversations API HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise ConversationsClientError(f"Conversations API request failed: {exc.reason}") from exc
        except (OSError, http_client.HTTPException) as exc:
            # Read timeouts surface as TimeoutError, not URLError.
            raise ConversationsClientError(f"Conversations API request failed: {exc or type(exc).__name__}") from exc
        except UnicodeDecodeError as exc:
            raise ConversationsClientError("Conversations API returned a body that is not UTF-8") from exc
        finally:
            logger.info(
                "conversations_api.request method=%s path=%s elapsed_ms=%.2f",
                method,
                path,
                (perf_counter() - started) * 1000.0,
            )

        try:
            decoded = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConversationsClientError("Conversations API returned invalid JSON") from exc
        if not isinstance(decoded, dict):
            raise ConversationsClientError("Conversations API returned an unexpected body")
        if decoded.get("success") is False:
            raise ConversationsClientError(str(decoded.get("error") or "Conversations API request was rejected"))
        return decoded


def get_default_conversations_client(settings: Settings | None = None) -> ConversationsClient:
    """Return a client configured from settings."""

    settings = settings or get_settings()
    return HttpConversationsClient(
        base_url=settings.api_base_url,
        token=settings.api_token,
        timeout_seconds=settings.request_timeout_seconds,
    )


def _quote(segment: str) -> str:
    return urllib_parse.quote(segment, safe="")


def _conversation_messages(body: dict[str, Any]) -> list[ChatMessage]:
    try:
        raw_messages = body["data"]["conversation"]["messages"]
        if not isinstance(raw_messages, list):
            raise TypeError("conversation messages must be a list")
        return [ChatMessage.model_validate(item) for item in raw_messages]
    except (KeyError, TypeError, ValidationError) as exc:
        raise ConversationsClientError("Conversations API returned an unexpected conversation payload") from exc
