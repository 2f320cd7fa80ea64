"""
Realtime WebSocket endpoint.

Connect with: ws://host/api/v1/ws?token=<id_token>
(or an `Authorization: Bearer <id_token>` header)

The token is checked exactly as for REST before the socket is accepted; a
rejected handshake is closed with code 4001 and the sub-reason
(missing, expired, revoked, malformed or unknown).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campusbuddy.api.deps import verify_identity
from campusbuddy.core.database import get_session_factory
from campusbuddy.core.exceptions import AuthenticationError
from campusbuddy.core.security import extract_bearer_token
from campusbuddy.services.realtime import get_gateway

router = APIRouter()

AUTH_FAILED_CLOSE_CODE = 4001


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    raw_token = token or extract_bearer_token(websocket.headers.get("authorization"))
    try:
        identity = verify_identity(raw_token)
    except AuthenticationError as e:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=e.reason)
        return

    gateway = get_gateway()
    connection = await gateway.connect(websocket, identity, session_factory)
    try:
        while True:
            raw = await websocket.receive_text()
            await gateway.receive(connection, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await gateway.disconnect(connection)
