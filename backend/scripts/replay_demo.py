"""Replay an out-of-order transport event stream into chat state.

Usage (from repository root):
    python backend/scripts/replay_demo.py

Usage (from backend directory):
    python scripts/replay_demo.py
    # or
    python -m scripts.replay_demo
"""

from __future__ import annotations

import argparse
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Make `chatsync` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from chatsync.services.transport import TransportEventHandler
from chatsync.state.chat_state import ChatState
from chatsync.state.types import ConversationKey


DEFAULT_PROJECT_ID = "demo-project"
DEFAULT_AGENT_ID = "demo-agent"


def build_demo_events(project_id: str, agent_id: str) -> list[tuple[str, dict]]:
    """Return a deterministic conversation as ``new-message`` events in send order."""

    base = datetime(2026, 2, 24, 14, 0, 0, tzinfo=timezone.utc)
    payloads = [
        ("user", "Can you summarise the onboarding doc?"),
        ("assistant", "It covers accounts, billing setup and the first project."),
        ("user", "What does billing setup involve?"),
        ("assistant", "Choosing a plan and adding a payment method."),
        ("user", "Thanks, that is enough for now."),
    ]
    return [
        (
            "new-message",
            {
                "projectId": project_id,
                "agentId": agent_id,
                "message": {
                    "id": f"m{idx}",
                    "role": role,
                    "content": content,
                    "timestamp": (base + timedelta(seconds=30 * idx)).isoformat(),
                },
            },
        )
        for idx, (role, content) in enumerate(payloads)
    ]


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Replay shuffled transport events into chat state.")
    parser.add_argument("--project-id", default=DEFAULT_PROJECT_ID)
    parser.add_argument("--agent-id", default=DEFAULT_AGENT_ID)
    parser.add_argument("--seed", type=int, default=7, help="Shuffle seed for delivery order (default: 7)")
    return parser.parse_args()


def main() -> None:
    """Deliver the demo events shuffled and print the resulting order."""

    args = parse_args()
    events = build_demo_events(args.project_id, args.agent_id)
    random.Random(args.seed).shuffle(events)

    state = ChatState()
    handler = TransportEventHandler(state)
    handler.dispatch("connect")
    for event, payload in events:
        handler.dispatch(event, payload)

    print("Delivery order: " + " ".join(payload["message"]["id"] for _, payload in events))
    print("Stored order:")
    for message in state.messages.messages(ConversationKey(args.project_id, args.agent_id)):
        print(f"  {message.timestamp.isoformat()} {message.id} {message.role}: {message.content}")


if __name__ == "__main__":
    main()
