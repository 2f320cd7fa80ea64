"""
Realtime gateway.

Manages live connections for the whole campus:
- Presence (online/offline, one tracked connection per user)
- Chat events, applied through the same chat service as the REST endpoints
- Typing indicators
- Announcement and status re-broadcasts
- Notifications to one user or to everyone

Frames in both directions are JSON objects; outbound frames carry
`{"type", "data", "timestamp"}`, inbound frames `{"type", "data"}`.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campusbuddy.core.exceptions import CampusBuddyError
from campusbuddy.core.logging_config import logger, set_user_id
from campusbuddy.core.security import VerifiedIdentity
from campusbuddy.core.types import generate_id
from campusbuddy.services import announcements, campus_status, chat, effects
from campusbuddy.services.presence import InMemoryPresenceStore, PresenceStore
from campusbuddy.services.users import Caller, resolve_caller
from campusbuddy.services.validation import require_text

USER_ONLINE = "user:online"
USER_OFFLINE = "user:offline"
USER_TYPING = "user:typing"
NOTIFICATION = "notification"
ERROR = "error"
PONG = "pong"

Handler = Callable[[AsyncSession, Caller, Dict[str, Any]], Awaitable[Any]]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def frame(event: str, data: Any) -> Dict[str, Any]:
    return {"type": event, "data": data, "timestamp": utc_timestamp()}


@dataclass
class Connection:
    """
    One accepted socket and the identity it authenticated as.
    The profile is loaded again for every inbound event.
    """
    websocket: Any
    identity: VerifiedIdentity
    session_factory: async_sessionmaker
    id: str = field(default_factory=generate_id)
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def user_id(self) -> str:
        return self.identity.uid


class RealtimeGateway:
    """
    Process-wide connection registry and event dispatcher.

    Implements the chat service's broadcaster and the badge notifier, so
    REST handlers publish through the same instance the sockets read from.
    """

    def __init__(self, presence: Optional[PresenceStore] = None):
        # connection_id -> Connection
        self._connections: Dict[str, Connection] = {}
        self.presence: PresenceStore = presence or InMemoryPresenceStore()
        self._handlers: Dict[str, Handler] = {
            "message:send": self._send_message,
            "message:edit": self._edit_message,
            "message:delete": self._delete_message,
            "message:reaction": self._react,
            "announcement:new": self._rebroadcast_announcement,
            "status:update": self._rebroadcast_status,
        }

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # ==================== Lifecycle ====================

    async def connect(
        self,
        websocket: Any,
        identity: VerifiedIdentity,
        session_factory: async_sessionmaker,
    ) -> Connection:
        """Accept a verified socket and announce the user"""
        await websocket.accept()

        uid = identity.uid
        connection = Connection(websocket=websocket, identity=identity, session_factory=session_factory)
        self._connections[connection.id] = connection
        self.presence.set(uid, connection.id)
        logger.log_realtime_event("connect", uid=uid, connection_id=connection.id)

        async with session_factory() as session:
            # First contact creates the profile
            await resolve_caller(session, identity)
            await effects.set_online(session, uid, True)

        await self.broadcast(USER_ONLINE, {"userId": uid}, exclude_user=uid)
        return connection

    async def disconnect(self, connection: Connection) -> None:
        if self._connections.pop(connection.id, None) is None:
            return
        logger.log_realtime_event("disconnect", uid=connection.user_id, connection_id=connection.id)

        # A newer connection for the same user keeps them online
        if not self.presence.remove_if(connection.user_id, connection.id):
            return

        async with connection.session_factory() as session:
            await effects.set_online(session, connection.user_id, False)

        await self.broadcast(USER_OFFLINE, {"userId": connection.user_id}, exclude_user=connection.user_id)

    # ==================== Sending ====================

    async def _deliver(self, connection: Connection, message: Dict[str, Any]) -> bool:
        try:
            await connection.websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Dropping dead connection for {connection.user_id}: {e}")
            return False

    async def broadcast(self, event: str, data: Any, exclude_user: Optional[str] = None) -> None:
        """Send to every connection, optionally skipping one user's"""
        message = frame(event, data)
        dead = []
        for connection in list(self._connections.values()):
            if exclude_user and connection.user_id == exclude_user:
                continue
            if not await self._deliver(connection, message):
                dead.append(connection)

        for connection in dead:
            await self.disconnect(connection)

    async def send(self, connection: Connection, event: str, data: Any) -> bool:
        if await self._deliver(connection, frame(event, data)):
            return True
        await self.disconnect(connection)
        return False

    async def send_to_user(self, user_id: str, event: str, data: Any) -> bool:
        """Deliver to the user's tracked connection; False when they are not connected"""
        connection = self._connections.get(self.presence.get(user_id) or "")
        if connection is None:
            return False
        return await self.send(connection, event, data)

    async def notify_user(self, user_id: str, payload: Any) -> bool:
        return await self.send_to_user(user_id, NOTIFICATION, payload)

    async def notify_all(self, payload: Any) -> None:
        await self.broadcast(NOTIFICATION, payload)

    # ==================== Inbound events ====================

    async def receive(self, connection: Connection, raw: str) -> None:
        """Parse one inbound text frame and dispatch it"""
        try:
            message = json.loads(raw)
        except ValueError:
            await self.send(connection, ERROR, {"message": "Invalid message format"})
            return
        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            await self.send(connection, ERROR, {"message": "Invalid message format"})
            return
        await self.handle(connection, message["type"], message.get("data"))

    async def handle(self, connection: Connection, event: str, data: Any) -> None:
        set_user_id(connection.user_id)
        logger.log_realtime_event(event, uid=connection.user_id)

        if event == "ping":
            await self.send(connection, PONG, {})
            return

        if event == USER_TYPING:
            is_typing = bool(data.get("isTyping")) if isinstance(data, dict) else False
            await self.broadcast(
                USER_TYPING,
                {"userId": connection.user_id, "isTyping": is_typing},
                exclude_user=connection.user_id,
            )
            return

        handler = self._handlers.get(event)
        if handler is None:
            await self.send(connection, ERROR, {"message": f"Unknown event: {event}"})
            return

        payload = data if isinstance(data, dict) else {"id": data}
        try:
            async with connection.session_factory() as session:
                caller = await resolve_caller(session, connection.identity)
                await handler(session, caller, payload)
        except CampusBuddyError as e:
            await self.send(connection, ERROR, {"message": e.message})
        except Exception as e:
            logger.log_error_with_context(e, f"realtime {event}", target_user=connection.user_id)
            await self.send(connection, ERROR, {"message": "Failed to process event"})

    async def _send_message(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        return await chat.send_message(session, caller, data.get("content"), self)

    async def _edit_message(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        message_id = require_text(data.get("messageId"), "Message ID is required", "messageId")
        return await chat.edit_message(session, caller, message_id, data.get("content"), self)

    async def _delete_message(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        message_id = require_text(data.get("messageId"), "Message ID is required", "messageId")
        return await chat.delete_message(session, caller, message_id, self)

    async def _react(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        message_id = require_text(data.get("messageId"), "Message ID is required", "messageId")
        return await chat.react_to_message(session, caller, message_id, data.get("emoji"), self)

    async def _rebroadcast_announcement(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        announcement_id = require_text(
            data.get("announcementId") or data.get("id"), "Announcement ID is required", "announcementId")
        return await announcements.rebroadcast(session, caller, announcement_id, self)

    async def _rebroadcast_status(self, session: AsyncSession, caller: Caller, data: Dict[str, Any]):
        status_id = require_text(data.get("statusId") or data.get("id"), "Status ID is required", "statusId")
        return await campus_status.rebroadcast(session, status_id, self)


_gateway: Optional[RealtimeGateway] = None


def get_gateway() -> RealtimeGateway:
    """Process-wide gateway instance"""
    global _gateway
    if _gateway is None:
        _gateway = RealtimeGateway()
    return _gateway


def set_gateway(gateway: Optional[RealtimeGateway]) -> None:
    global _gateway
    _gateway = gateway
