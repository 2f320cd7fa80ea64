"""
Presence map: which connection currently represents a user.

Volatile by design of the deployment: it lives in process memory and is
empty after a restart. Only one connection per user is tracked; the most
recent connect wins.
"""
from typing import Dict, Optional, Protocol


class PresenceStore(Protocol):
    def set(self, user_id: str, connection_id: str) -> None:
        ...

    def get(self, user_id: str) -> Optional[str]:
        ...

    def remove_if(self, user_id: str, connection_id: str) -> bool:
        ...

    def online_users(self) -> list:
        ...


class InMemoryPresenceStore:
    def __init__(self):
        # user_id -> connection_id
        self._connections: Dict[str, str] = {}

    def set(self, user_id: str, connection_id: str) -> None:
        self._connections[user_id] = connection_id

    def get(self, user_id: str) -> Optional[str]:
        return self._connections.get(user_id)

    def remove_if(self, user_id: str, connection_id: str) -> bool:
        """Drop the mapping only if it still points at `connection_id`"""
        if self._connections.get(user_id) != connection_id:
            return False
        del self._connections[user_id]
        return True

    def online_users(self) -> list:
        return list(self._connections)

    def clear(self) -> None:
        self._connections.clear()
