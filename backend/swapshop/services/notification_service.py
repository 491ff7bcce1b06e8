"""
Notifications: persisted rows plus best-effort fan-out (realtime socket, APNs).

NotificationSink.notify() is what the core services call after their transaction commits;
it hands the work to the dispatcher so a failed insert or push never touches the caller.
The query helpers below back the /notifications routes.
"""
import logging
from datetime import timedelta
from typing import Any, Callable

from sqlalchemy.orm import Session, sessionmaker

from swapshop.db.base import utcnow
from swapshop.models.notification import Notification
from swapshop.models.push_token import PushToken
from swapshop.services.dispatcher import SideEffectDispatcher
from swapshop.services.push import send_push_to_devices
from swapshop.services.realtime import RealtimeHub

logger = logging.getLogger(__name__)

PushSender = Callable[[list[str], str, str, dict[str, Any] | None], int]


def notification_to_dict(r: Notification) -> dict[str, Any]:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "type": r.type,
        "title": r.title,
        "body": r.body,
        "data": r.payload or {},
        "is_read": bool(r.is_read),
        "read_at": r.read_at.isoformat() if r.read_at else None,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }


class NotificationSink:
    """Creates notifications in their own session, then pushes them over the hub and APNs."""

    def __init__(
        self,
        session_factory: sessionmaker,
        dispatcher: SideEffectDispatcher,
        hub: RealtimeHub | None = None,
        push_sender: PushSender = send_push_to_devices,
    ):
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._hub = hub
        self._push_sender = push_sender

    def create(
        self,
        user_id: str,
        type: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        db = self._session_factory()
        try:
            row = Notification(user_id=user_id, type=type, title=title, body=body, payload=data or {})
            db.add(row)
            db.commit()
            db.refresh(row)
            created = notification_to_dict(row)
            tokens = [t.device_token for t in db.query(PushToken).filter(PushToken.user_id == user_id).all()]
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.debug("Notification %s (%s) created for %s", created["id"], type, user_id)
        if self._hub is not None:
            self._hub.emit(user_id, "notification", created)
        if tokens:
            self._push_sender(tokens, title, body, data)
        return created

    def notify(
        self,
        user_id: str,
        type: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Fire-and-forget create(); call only after the primary transaction committed."""
        self._dispatcher.submit(f"notify:{type}", self.create, user_id, type, title, body, data)

    def emit(self, user_id: str, event: str, data: dict[str, Any]) -> None:
        """Fire-and-forget realtime event with no persisted notification."""
        if self._hub is None:
            return
        self._dispatcher.submit(f"emit:{event}", self._hub.emit, user_id, event, data)


def list_notifications(db: Session, user_id: str, limit: int = 80, unread_only: bool = False) -> dict[str, Any]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read.is_(False))
    rows = q.order_by(Notification.created_at.desc()).limit(limit).all()
    return {
        "notifications": [notification_to_dict(r) for r in rows],
        "unread_count": get_unread_count(db, user_id),
    }


def get_unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, user_id: str, notification_id: str) -> Notification | None:
    """Mark one of the user's notifications read. Returns None if it does not exist for this user."""
    row = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if row is None:
        return None
    if not row.is_read:
        row.is_read = True
        row.read_at = utcnow()
        db.commit()
        db.refresh(row)
    return row


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True, Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, user_id: str, notification_id: str) -> bool:
    deleted = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def prune_read_notifications(db: Session, retention_days: int) -> int:
    """Delete read notifications older than retention_days. Unread ones are kept."""
    cutoff = utcnow() - timedelta(days=retention_days)
    deleted = (
        db.query(Notification)
        .filter(Notification.is_read.is_(True), Notification.created_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
