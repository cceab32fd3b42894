"""Registry of open websockets keyed by private notification channel."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket


def channel_for(username: str) -> str:
    """Return the private channel name for ``username``."""

    return f"user_{username}"


class NotificationConnectionManager:
    """Track which sockets listen on which ``user_<username>`` channel.

    A user may hold several sockets at once (one per tab or device); a push
    goes to all of them.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        """Complete the handshake, then subscribe ``websocket`` to ``channel``."""

        await websocket.accept()
        self._connections[channel].add(websocket)

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        listeners = self._connections.get(channel)
        if listeners is None:
            return
        listeners.discard(websocket)
        if not listeners:
            self._connections.pop(channel, None)

    async def send_to_channel(self, channel: str, message: dict[str, Any]) -> None:
        """Write ``message`` as JSON to each subscriber of ``channel``."""

        for listener in list(self._connections.get(channel, set())):
            try:
                await listener.send_json(message)
            except Exception:  # pragma: no cover - socket closed under us
                self.disconnect(channel, listener)


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "channel_for", "notification_manager"]
