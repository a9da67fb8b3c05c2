"""Real-time transport socket and outbound transport commands."""

import json
import logging

from fastapi import APIRouter, Depends, Path, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from chatsync.dependencies import get_transport_hub, get_transport_hub_for_socket
from chatsync.schemas.chat import CommandResult
from chatsync.schemas.common import ApiResponse, TransportReply
from chatsync.schemas.events import TransportFrame
from chatsync.services.transport import TransportEventError, TransportHub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/transport")
async def transport_socket(
    websocket: WebSocket,
    hub: TransportHub = Depends(get_transport_hub_for_socket),
) -> None:
    hub.connection_opened()
    reason = "client disconnect"
    try:
        await websocket.accept()
        hub.add_peer(websocket)
        while True:
            raw = await websocket.receive_text()
            try:
                frame = TransportFrame.model_validate(json.loads(raw))
                hub.handler.dispatch(frame.event, frame.data)
            except (json.JSONDecodeError, ValidationError, TransportEventError) as exc:
                logger.warning("transport.frame_rejected detail=%s", exc)
                reply = TransportReply(type="error", detail=str(exc))
            else:
                reply = TransportReply(type="ack", event=frame.event)
            await websocket.send_text(reply.model_dump_json())
    except WebSocketDisconnect as exc:
        reason = f"code {exc.code}"
    finally:
        hub.discard_peer(websocket)
        hub.connection_closed(reason)


async def _send_command(hub: TransportHub, event: str, project_id: str) -> ApiResponse[CommandResult]:
    delivered = await hub.emit(event, {"projectId": project_id})
    return ApiResponse(data=CommandResult(event=event, delivered=delivered))


@router.post("/projects/{project_id}/join", response_model=ApiResponse[CommandResult])
async def join_project(
    project_id: str = Path(..., min_length=1),
    hub: TransportHub = Depends(get_transport_hub),
) -> ApiResponse[CommandResult]:
    """Ask the transport to subscribe to a project's room."""

    return await _send_command(hub, "join-project", project_id)


@router.post("/projects/{project_id}/leave", response_model=ApiResponse[CommandResult])
async def leave_project(
    project_id: str = Path(..., min_length=1),
    hub: TransportHub = Depends(get_transport_hub),
) -> ApiResponse[CommandResult]:
    return await _send_command(hub, "leave-project", project_id)


@router.post("/projects/{project_id}/typing/start", response_model=ApiResponse[CommandResult])
async def start_typing(
    project_id: str = Path(..., min_length=1),
    hub: TransportHub = Depends(get_transport_hub),
) -> ApiResponse[CommandResult]:
    """Announce that the local user started composing."""

    return await _send_command(hub, "typing-start", project_id)


@router.post("/projects/{project_id}/typing/stop", response_model=ApiResponse[CommandResult])
async def stop_typing(
    project_id: str = Path(..., min_length=1),
    hub: TransportHub = Depends(get_transport_hub),
) -> ApiResponse[CommandResult]:
    return await _send_command(hub, "typing-stop", project_id)
