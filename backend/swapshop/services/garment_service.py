"""
Garment directory: listings, owner-only status changes, soft delete, discovery feed.

Counters (like_count, super_like_count) are not writable here; only swipes and super-likes move them.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from swapshop.core.constants import (
    DISCOVERY_FEED_LIMIT,
    GARMENT_ACTIVE,
    GARMENT_DELETED,
    GARMENT_STATUSES,
)
from swapshop.core.errors import BadRequestError, ForbiddenError, NotFoundError
from swapshop.models.garment import Garment
from swapshop.models.swipe import Swipe

logger = logging.getLogger(__name__)


def garment_to_dict(g: Garment) -> dict:
    return {
        "id": g.id,
        "owner_id": g.owner_id,
        "title": g.title,
        "description": g.description,
        "size": g.size,
        "category": g.category,
        "status": g.status,
        "like_count": g.like_count,
        "super_like_count": g.super_like_count,
        "created_at": g.created_at.isoformat() if g.created_at else None,
    }


def create_garment(
    db: Session,
    owner_id: str,
    title: str,
    description: str | None = None,
    size: str | None = None,
    category: str | None = None,
) -> Garment:
    title = (title or "").strip()
    if not title:
        raise BadRequestError("title is required")
    row = Garment(
        owner_id=owner_id,
        title=title,
        description=description,
        size=size,
        category=category,
        status=GARMENT_ACTIVE,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Garment %s listed by %s", row.id, owner_id)
    return row


def get_garment(db: Session, garment_id: str) -> Garment:
    """Visible garment; soft-deleted rows read as missing."""
    row = db.get(Garment, garment_id)
    if row is None or row.status == GARMENT_DELETED:
        raise NotFoundError("Garment not found")
    return row


def _get_owned(db: Session, garment_id: str, user_id: str, action: str) -> Garment:
    row = get_garment(db, garment_id)
    if row.owner_id != user_id:
        raise ForbiddenError(f"Not authorized to {action} this garment")
    return row


def update_garment_status(db: Session, garment_id: str, user_id: str, status: str) -> Garment:
    """Owner moves a listing between ACTIVE/RESERVED/INACTIVE/SWAPPED. DELETED goes through delete_garment."""
    if status not in GARMENT_STATUSES or status == GARMENT_DELETED:
        raise BadRequestError(f"Invalid garment status {status}")
    row = _get_owned(db, garment_id, user_id, "update")
    row.status = status
    db.commit()
    db.refresh(row)
    return row


def delete_garment(db: Session, garment_id: str, user_id: str) -> None:
    row = _get_owned(db, garment_id, user_id, "delete")
    row.status = GARMENT_DELETED
    db.commit()
    logger.info("Garment %s soft-deleted by %s", garment_id, user_id)


def list_user_garments(db: Session, owner_id: str) -> list[Garment]:
    return (
        db.query(Garment)
        .filter(Garment.owner_id == owner_id, Garment.status != GARMENT_DELETED)
        .order_by(Garment.created_at.desc())
        .all()
    )


def discovery_feed(db: Session, user_id: str, limit: int = DISCOVERY_FEED_LIMIT, offset: int = 0) -> list[Garment]:
    """ACTIVE garments from other users that user_id has not swiped yet, newest first."""
    swiped = select(Swipe.garment_id).where(Swipe.swiper_id == user_id)
    return (
        db.query(Garment)
        .filter(
            Garment.status == GARMENT_ACTIVE,
            Garment.owner_id != user_id,
            Garment.id.not_in(swiped),
        )
        .order_by(Garment.created_at.desc(), Garment.id)
        .offset(offset)
        .limit(min(limit, DISCOVERY_FEED_LIMIT))
        .all()
    )
