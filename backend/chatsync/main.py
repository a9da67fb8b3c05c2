"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatsync.config import Settings, get_settings
from chatsync.routers import conversations, transport
from chatsync.services.chat import ChatService
from chatsync.services.conversations_client import ConversationsClient, get_default_conversations_client
from chatsync.services.transport import TransportEventHandler, TransportHub
from chatsync.state.chat_state import ChatState
from chatsync.state.message_store import MessageStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    client: ConversationsClient | None = None,
    state: ChatState | None = None,
) -> FastAPI:
    """Build the application and the single chat state it owns."""

    settings = settings or get_settings()
    state = state or ChatState(messages=MessageStore(temp_id_prefix=settings.temp_id_prefix))
    client = client or get_default_conversations_client(settings)

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.chat_state = state
    app.state.chat_service = ChatService(state, client)
    app.state.transport_hub = TransportHub(TransportEventHandler(state))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(conversations.router, tags=["conversations"])
    app.include_router(transport.router, tags=["transport"])

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health check endpoint."""

        return {"status": "ok"}

    logger.info("app.created api_base_url=%s", settings.api_base_url)
    return app


app = create_app()
