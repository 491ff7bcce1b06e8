"""
User notifications API: list, mark read, delete.

Rows are written by the notification sink (new match, new message, super like, swap completed);
this router only reads and updates read state for the acting user.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id
from swapshop.core.constants import NOTIFICATION_LIST_LIMIT
from swapshop.core.errors import NotFoundError
from swapshop.db.session import get_db
from swapshop.services import notification_service

router = APIRouter()
logger = logging.getLogger(__name__)


# --- List ---


@router.get("/notifications")
def list_notifications(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    limit: int = Query(80, ge=1, le=NOTIFICATION_LIST_LIMIT),
    unread_only: bool = Query(False),
) -> dict[str, Any]:
    """
    List notifications for the user, newest first.
    Use unread_only=true to only return unread (e.g. for badge count or filtered view).
    """
    return notification_service.list_notifications(db, user_id, limit=limit, unread_only=unread_only)


# --- Mark one read ---


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    row = notification_service.mark_read(db, user_id, notification_id)
    if row is None:
        raise NotFoundError("Notification not found")
    return {"ok": True, "id": notification_id, "read_at": row.read_at.isoformat() if row.read_at else None}


# --- Mark all read ---


@router.post("/notifications/mark-all-read")
def mark_all_read(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Mark all of the user's notifications read (e.g. 'Clear all' in UI)."""
    return {"ok": True, "marked_count": notification_service.mark_all_read(db, user_id)}


@router.delete("/notifications/{notification_id}")
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    if not notification_service.delete_notification(db, user_id, notification_id):
        raise NotFoundError("Notification not found")
    return {"ok": True, "id": notification_id}
