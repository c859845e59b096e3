"""Live channel endpoint.

Clients authenticate during the handshake with the same bearer token the
HTTP API accepts, passed either as ``?token=`` or in the Authorization
header. Rejected handshakes are closed with 1008 (policy violation).
"""

from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from jobboard.auth import AuthenticationError
from jobboard.logging import get_logger
from jobboard.realtime import RealtimeSession

logger = get_logger(__name__, component="realtime")

router = APIRouter(tags=["realtime"])


def _handshake_token(websocket: WebSocket) -> Optional[str]:
    token = websocket.query_params.get("token")
    if token:
        return token
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


@router.websocket("/ws")
async def live_channel(websocket: WebSocket):
    tokens = websocket.app.state.token_service
    services = websocket.app.state.services

    try:
        actor = tokens.decode(_handshake_token(websocket))
    except AuthenticationError as e:
        logger.warning(
            "Rejected live connection",
            extra={"event": "realtime.connection.rejected", "reason": e.message},
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = RealtimeSession(websocket, actor, services.broadcaster)
    session.open()
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                logger.warning(
                    "Ignoring binary frame",
                    extra={"event": "realtime.frame.invalid", "user_id": actor.user_id},
                )
                continue
            await session.handle_text(text)
    except WebSocketDisconnect:
        pass
    finally:
        session.close()
