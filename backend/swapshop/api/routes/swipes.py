"""
Swipe API: swipe, undo, history, super-likes.

POST /swipes returns {swipe_id, is_match, match_id?}; a mutual RIGHT swipe creates the match
and its conversation before the response is sent.
"""
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id, get_notifier
from swapshop.core.constants import DAILY_SUPER_LIKE_LIMIT
from swapshop.core.marketplace_config import MAX_SUPER_LIKE_MESSAGE_LENGTH
from swapshop.db.session import get_db
from swapshop.services import superlike_service, swipe_service
from swapshop.services.notification_service import NotificationSink
from swapshop.services.superlike_service import super_like_to_dict
from swapshop.services.swipe_service import swipe_to_dict

router = APIRouter()
logger = logging.getLogger(__name__)


class SwipeRequest(BaseModel):
    garment_id: str = Field(..., min_length=1, max_length=36)
    direction: Literal["LEFT", "RIGHT"]


class SuperLikeRequest(BaseModel):
    garment_id: str = Field(..., min_length=1, max_length=36)
    message: str | None = Field(None, max_length=MAX_SUPER_LIKE_MESSAGE_LENGTH)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_swipe(
    body: SwipeRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    notifier: NotificationSink = Depends(get_notifier),
) -> dict[str, Any]:
    result = swipe_service.swipe(db, user_id, body.garment_id, body.direction, notifier=notifier)
    return result.to_dict()


@router.post("/undo")
def undo_swipe(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Undo the caller's most recent swipe (only within the undo window)."""
    return swipe_service.undo_last_swipe(db, user_id)


@router.get("/history")
def swipe_history(
    direction: Literal["LEFT", "RIGHT"] | None = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    rows = swipe_service.get_swipe_history(db, user_id, direction)
    return {"swipes": [swipe_to_dict(r) for r in rows]}


# --- Super-likes ---


@router.post("/super-like", status_code=status.HTTP_201_CREATED)
def super_like(
    body: SuperLikeRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    notifier: NotificationSink = Depends(get_notifier),
) -> dict[str, Any]:
    row = superlike_service.send_super_like(db, user_id, body.garment_id, body.message, notifier=notifier)
    return super_like_to_dict(row)


@router.get("/super-likes/received")
def super_likes_received(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return {"super_likes": [super_like_to_dict(r) for r in superlike_service.get_received(db, user_id)]}


@router.get("/super-likes/sent")
def super_likes_sent(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return {"super_likes": [super_like_to_dict(r) for r in superlike_service.get_sent(db, user_id)]}


@router.get("/super-likes/remaining")
def super_likes_remaining(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return {"remaining": superlike_service.get_remaining_today(db, user_id), "limit": DAILY_SUPER_LIKE_LIMIT}
