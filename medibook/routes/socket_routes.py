import logging

import jwt
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from medibook.auth.dependencies import identity_from_token

router = APIRouter()

logger = logging.getLogger(__name__)


@router.websocket('/ws')
async def events(websocket: WebSocket, token: str | None = None):
    """Pushes booking and schedule events. Anonymous sockets only get public events."""
    hub = websocket.app.state.event_bus

    user_id = None
    if token:
        try:
            user_id = identity_from_token(token).id
        except jwt.InvalidTokenError:
            logger.info('Refused socket with an invalid token')
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    connection = await hub.connect(websocket, user_id)
    try:
        while True:
            # Clients never send anything meaningful; this only waits for the close.
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug('Socket for user=%s closed by client', user_id)
    finally:
        hub.disconnect(connection)
