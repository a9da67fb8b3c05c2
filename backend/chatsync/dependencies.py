"""FastAPI dependencies resolving the application's chat state."""

from fastapi import Request, WebSocket

from chatsync.services.chat import ChatService
from chatsync.services.transport import TransportHub
from chatsync.state.chat_state import ChatState


def get_chat_state(request: Request) -> ChatState:
    return request.app.state.chat_state


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_transport_hub(request: Request) -> TransportHub:
    return request.app.state.transport_hub


def get_transport_hub_for_socket(websocket: WebSocket) -> TransportHub:
    return websocket.app.state.transport_hub
