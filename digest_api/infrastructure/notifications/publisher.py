"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from digest_api.domain.entities import Notification
from digest_api.utils import isoformat_or_none

from .manager import NotificationConnectionManager, channel_for, notification_manager

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and schedule their delivery.

    Delivery is fire-and-forget: a failure here is logged and never reaches
    the caller, so a persisted notification is not undone by a push error.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task] = set()

    def dispatch(self, notification: Notification) -> bool:
        """Schedule ``notification`` on its recipient's channel."""

        channel = channel_for(notification.recipient)
        message = {"type": "notification", "data": serialize_notification(notification)}
        try:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # Called from a worker thread of the ASGI server.
                from_thread.run(self._manager.send_to_channel, channel, message)
            else:
                task = loop.create_task(self._manager.send_to_channel(channel, message))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
        except Exception:
            logger.exception(
                "Realtime delivery of notification %s to %s failed",
                notification.id,
                channel,
            )
            return False
        return True


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipient": notification.recipient,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "read": notification.read,
        "related_id": notification.related_id,
        "payload": notification.payload or {},
        "created_at": isoformat_or_none(notification.created_at),
        "updated_at": isoformat_or_none(notification.updated_at),
    }


notification_publisher = NotificationPublisher(notification_manager)


def dispatch_notification(notification: Notification) -> bool:
    """Public helper that delegates to the shared publisher instance."""

    return notification_publisher.dispatch(notification)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
]
