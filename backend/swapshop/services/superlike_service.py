"""
Super-likes: at most one per (giver, garment) and DAILY_SUPER_LIKE_LIMIT per giver per local day.

The day starts at local midnight (SUPER_LIKE_DAY_TIMEZONE, else server local time). The giver's
user row is locked (SELECT ... FOR UPDATE) while counting and inserting so two concurrent sends
by the same giver can't both take the last slot; uq_super_likes_giver_garment guards duplicates.
"""
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from swapshop.core.constants import DAILY_SUPER_LIKE_LIMIT, GARMENT_ACTIVE, NOTIFY_SUPER_LIKE
from swapshop.core.errors import BadRequestError, NotFoundError
from swapshop.core.marketplace_config import MAX_SUPER_LIKE_MESSAGE_LENGTH, start_of_quota_day
from swapshop.models.garment import Garment
from swapshop.models.super_like import SuperLike
from swapshop.models.user import User
from swapshop.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)

MSG_ALREADY_SUPER_LIKED = "Already super liked this garment"


def super_like_to_dict(s: SuperLike) -> dict[str, Any]:
    return {
        "id": s.id,
        "giver_id": s.giver_id,
        "receiver_id": s.receiver_id,
        "garment_id": s.garment_id,
        "message": s.message,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def count_sent_today(db: Session, user_id: str) -> int:
    return (
        db.query(SuperLike)
        .filter(SuperLike.giver_id == user_id, SuperLike.created_at >= start_of_quota_day())
        .count()
    )


def get_remaining_today(db: Session, user_id: str) -> int:
    return max(0, DAILY_SUPER_LIKE_LIMIT - count_sent_today(db, user_id))


def find_super_like(db: Session, giver_id: str, garment_id: str) -> str | None:
    row = (
        db.query(SuperLike.id)
        .filter(SuperLike.giver_id == giver_id, SuperLike.garment_id == garment_id)
        .first()
    )
    return row.id if row is not None else None


def send_super_like(
    db: Session,
    giver_id: str,
    garment_id: str,
    message: str | None = None,
    notifier: NotificationSink | None = None,
) -> SuperLike:
    message = (message or "").strip() or None
    if message is not None and len(message) > MAX_SUPER_LIKE_MESSAGE_LENGTH:
        raise BadRequestError(f"Message must be at most {MAX_SUPER_LIKE_MESSAGE_LENGTH} characters")

    garment = db.get(Garment, garment_id)
    if garment is None:
        raise NotFoundError("Garment not found")
    if garment.status != GARMENT_ACTIVE:
        raise BadRequestError("This garment is not available")
    if garment.owner_id == giver_id:
        raise BadRequestError("Cannot super like your own garment")
    owner_id, garment_title = garment.owner_id, garment.title

    # Serialize this giver's sends for the rest of the transaction
    giver = db.query(User).filter(User.id == giver_id).with_for_update().one_or_none()
    if giver is None:
        raise NotFoundError("User not found")

    if count_sent_today(db, giver_id) >= DAILY_SUPER_LIKE_LIMIT:
        db.rollback()
        raise BadRequestError(f"Daily super like limit ({DAILY_SUPER_LIKE_LIMIT}) reached", code="QUOTA_EXCEEDED")

    if find_super_like(db, giver_id, garment_id) is not None:
        db.rollback()
        raise BadRequestError(MSG_ALREADY_SUPER_LIKED, code="ALREADY_SUPER_LIKED")

    row = SuperLike(giver_id=giver_id, receiver_id=owner_id, garment_id=garment_id, message=message)
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        # uq_super_likes_giver_garment lost to a concurrent send; anything else propagates
        if find_super_like(db, giver_id, garment_id) is None:
            raise
        raise BadRequestError(MSG_ALREADY_SUPER_LIKED, code="ALREADY_SUPER_LIKED")
    db.query(Garment).filter(Garment.id == garment_id).update(
        {Garment.super_like_count: Garment.super_like_count + 1}, synchronize_session=False
    )
    giver_name = giver.display_name or giver.username
    db.commit()
    db.refresh(row)
    logger.info("Super like %s: %s -> garment %s", row.id, giver_id, garment_id)

    if notifier is not None:
        notifier.notify(
            owner_id,
            NOTIFY_SUPER_LIKE,
            "Super Like received!",
            f'@{giver_name} super liked your garment "{garment_title}"',
            {"super_like_id": row.id, "garment_id": garment_id, "giver_id": giver_id},
        )
    return row


def get_received(db: Session, user_id: str) -> list[SuperLike]:
    return (
        db.query(SuperLike)
        .filter(SuperLike.receiver_id == user_id)
        .order_by(SuperLike.created_at.desc())
        .all()
    )


def get_sent(db: Session, user_id: str) -> list[SuperLike]:
    return (
        db.query(SuperLike)
        .filter(SuperLike.giver_id == user_id)
        .order_by(SuperLike.created_at.desc())
        .all()
    )
