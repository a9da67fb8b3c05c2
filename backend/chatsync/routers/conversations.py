"""Conversation state routes."""

from fastapi import APIRouter, Depends, HTTPException, Path

from chatsync.dependencies import get_chat_service, get_chat_state
from chatsync.schemas.chat import ConnectionStatus, ConversationSnapshot, SendMessageRequest
from chatsync.schemas.common import ApiResponse
from chatsync.schemas.typing_status import TypingStatus
from chatsync.services.chat import ChatSendError, ChatService
from chatsync.services.conversations_client import ConversationsClientError
from chatsync.state.chat_state import ChatState
from chatsync.state.types import ConversationKey


router = APIRouter()


@router.get("/conversations/{project_id}/{agent_id}", response_model=ApiResponse[ConversationSnapshot])
def get_conversation(
    project_id: str = Path(..., min_length=1),
    agent_id: str = Path(..., min_length=1),
    state: ChatState = Depends(get_chat_state),
) -> ApiResponse[ConversationSnapshot]:
    """Return messages, typing users and flags for one conversation."""

    return ApiResponse(data=state.snapshot(ConversationKey(project_id, agent_id)))


@router.post("/conversations/{project_id}/{agent_id}/messages", response_model=ApiResponse[ConversationSnapshot])
def send_message(
    payload: SendMessageRequest,
    project_id: str = Path(..., min_length=1),
    agent_id: str = Path(..., min_length=1),
    service: ChatService = Depends(get_chat_service),
) -> ApiResponse[ConversationSnapshot]:
    """Send a user message and return the reconciled conversation."""

    key = ConversationKey(project_id, agent_id)
    try:
        service.send_message(key, payload.content, include_files=payload.include_files)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ChatSendError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ApiResponse(data=service.state.snapshot(key))


@router.post("/conversations/{project_id}/{agent_id}/history", response_model=ApiResponse[ConversationSnapshot])
def refresh_history(
    project_id: str = Path(..., min_length=1),
    agent_id: str = Path(..., min_length=1),
    service: ChatService = Depends(get_chat_service),
) -> ApiResponse[ConversationSnapshot]:
    """Reload the authoritative history into local state."""

    key = ConversationKey(project_id, agent_id)
    try:
        service.load_history(key)
    except ConversationsClientError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ApiResponse(data=service.state.snapshot(key))


@router.delete("/conversations/{project_id}/{agent_id}", response_model=ApiResponse[ConversationSnapshot])
def clear_conversation(
    project_id: str = Path(..., min_length=1),
    agent_id: str = Path(..., min_length=1),
    service: ChatService = Depends(get_chat_service),
) -> ApiResponse[ConversationSnapshot]:
    key = ConversationKey(project_id, agent_id)
    try:
        service.clear_conversation(key)
    except ConversationsClientError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ApiResponse(data=service.state.snapshot(key))


@router.get("/projects/{project_id}/typing", response_model=ApiResponse[list[TypingStatus]])
def get_typing_users(
    project_id: str = Path(..., min_length=1),
    state: ChatState = Depends(get_chat_state),
) -> ApiResponse[list[TypingStatus]]:
    return ApiResponse(data=state.typing.typing_users(project_id))


@router.get("/connection", response_model=ApiResponse[ConnectionStatus])
def get_connection(state: ChatState = Depends(get_chat_state)) -> ApiResponse[ConnectionStatus]:
    return ApiResponse(data=ConnectionStatus(connected=state.connected))
