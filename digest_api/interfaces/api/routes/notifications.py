"""Endpoints and websocket handler for notifications and daily digests."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from digest_api.application.use_cases.notifications import (
    SummaryPersistenceError,
    SummarySourceUnavailableError,
    compose_summary,
    get_notification_breakdown,
)
from digest_api.domain.entities import Notification, SummaryBreakdown, SummaryStatus, User
from digest_api.infrastructure.database import SessionLocal, get_db
from digest_api.infrastructure.notifications import (
    channel_for,
    dispatch_notification,
    notification_manager,
    serialize_notification,
)
from digest_api.infrastructure.repositories import NotificationRepository
from digest_api.interfaces.api.dependencies import get_current_user, resolve_current_user
from digest_api.interfaces.api.schemas import (
    CommunityQuestionsRead,
    DirectMessageThreadRead,
    JobFairItemRead,
    NotificationBulkResult,
    NotificationCountRead,
    NotificationRead,
    SummaryBreakdownRead,
    SummaryResultMessage,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

_LIST_LIMIT = 100
NOTHING_TO_REPORT_MESSAGE = "No new notifications to summarize"
NOT_CONFIGURED_MESSAGE = "User does not have summarized notifications enabled"


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        recipient=notification.recipient,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        read=notification.read,
        related_id=notification.related_id,
        payload=notification.payload or {},
        created_at=notification.created_at,
        updated_at=notification.updated_at,
    )


def _breakdown_to_schema(breakdown: SummaryBreakdown) -> SummaryBreakdownRead:
    return SummaryBreakdownRead(
        since=breakdown.since,
        dm_messages={
            str(thread.chat_id): DirectMessageThreadRead.model_validate(thread)
            for thread in breakdown.dm_messages
        },
        community_questions={
            str(group.community_id): CommunityQuestionsRead.model_validate(group)
            for group in breakdown.community_questions
        },
        job_fairs=[JobFairItemRead.model_validate(item) for item in breakdown.job_fairs],
    )


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    notifications = NotificationRepository(db).list_for_user(
        current_user.username, unread_only=unread_only, limit=_LIST_LIMIT
    )
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/count", response_model=NotificationCountRead)
def count_unread_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationCountRead:
    count = NotificationRepository(db).count_unread(current_user.username)
    return NotificationCountRead(count=count)


@router.post("/summary", response_model=NotificationRead | SummaryResultMessage)
def generate_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationRead | SummaryResultMessage:
    """Compose a digest for the caller right away."""

    try:
        outcome = compose_summary(db, current_user.username)
    except SummarySourceUnavailableError as exc:
        logger.exception("On-demand summary for %s failed", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except SummaryPersistenceError as exc:
        logger.exception("On-demand summary for %s failed", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    if outcome.status is SummaryStatus.NOT_CONFIGURED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=NOT_CONFIGURED_MESSAGE
        )
    if outcome.status is SummaryStatus.NOTHING_TO_REPORT or outcome.notification is None:
        return SummaryResultMessage(message=NOTHING_TO_REPORT_MESSAGE)

    dispatch_notification(outcome.notification)
    return _notification_to_schema(outcome.notification)


@router.get("/{notification_id}/summary-breakdown", response_model=SummaryBreakdownRead)
def get_summary_breakdown_route(
    notification_id: int,
    since: datetime | None = Query(None, description="Override the digest window start"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SummaryBreakdownRead:
    """Itemize the activity a digest notification counted."""

    try:
        breakdown = get_notification_breakdown(
            db, current_user.username, notification_id, since=since
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SummarySourceUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return _breakdown_to_schema(breakdown)


@router.patch("/read-all", response_model=NotificationBulkResult)
def mark_all_notifications_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationBulkResult:
    updated = NotificationRepository(db).mark_all_as_read(current_user.username)
    return NotificationBulkResult(affected=updated)


@router.delete("/clear-all", response_model=NotificationBulkResult)
def clear_all_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationBulkResult:
    deleted = NotificationRepository(db).clear_for_user(current_user.username)
    return NotificationBulkResult(affected=deleted)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationRead:
    repository = NotificationRepository(db)
    if not repository.mark_as_read([notification_id], recipient=current_user.username):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    notification = repository.get_for_recipient(
        notification_id, recipient=current_user.username
    )
    return _notification_to_schema(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint streaming notifications on the caller's private channel."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        pending_notifications = NotificationRepository(session).list_unread_for_user(
            user.username
        )
    except HTTPException:
        await websocket.close(code=1008)
        return
    except Exception:  # pragma: no cover - unexpected storage failure
        logger.exception("Could not open the notification stream")
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    channel = channel_for(user.username)
    await notification_manager.connect(channel, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending_notifications]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    ack_session = SessionLocal()
                    try:
                        NotificationRepository(ack_session).mark_as_read(
                            [item for item in ids if isinstance(item, int)],
                            recipient=user.username,
                        )
                    finally:
                        ack_session.close()
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(channel, websocket)
    except Exception:  # pragma: no cover - connection dropped mid-send
        notification_manager.disconnect(channel, websocket)
        raise
