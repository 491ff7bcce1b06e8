"""
Swipe ledger: one LEFT/RIGHT decision per (user, garment), short undo window, history.

swipe() commits the swipe (and the like counter bump) first, then hands RIGHT swipes to
the match engine in a second transaction.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from swapshop.core.constants import (
    GARMENT_ACTIVE,
    SWIPE_DIRECTIONS,
    SWIPE_HISTORY_LIMIT,
    SWIPE_RIGHT,
    UNDO_WINDOW_SECONDS,
)
from swapshop.core.errors import BadRequestError, NotFoundError
from swapshop.core.marketplace_config import undo_cutoff
from swapshop.db.base import as_utc
from swapshop.models.garment import Garment
from swapshop.models.swipe import Swipe
from swapshop.services.match_engine import evaluate_right_swipe
from swapshop.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)

MSG_ALREADY_SWIPED = "Already swiped on this garment"


@dataclass(frozen=True)
class SwipeResult:
    swipe_id: str
    is_match: bool
    match_id: str | None = None

    def to_dict(self) -> dict:
        out = {"swipe_id": self.swipe_id, "is_match": self.is_match}
        if self.match_id is not None:
            out["match_id"] = self.match_id
        return out


def swipe_to_dict(s: Swipe) -> dict:
    return {
        "id": s.id,
        "swiper_id": s.swiper_id,
        "swiped_id": s.swiped_id,
        "garment_id": s.garment_id,
        "direction": s.direction,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def find_swipe(db: Session, swiper_id: str, garment_id: str) -> str | None:
    row = (
        db.query(Swipe.id)
        .filter(Swipe.swiper_id == swiper_id, Swipe.garment_id == garment_id)
        .first()
    )
    return row.id if row is not None else None


def record_swipe(db: Session, swiper_id: str, garment_id: str, direction: str) -> Swipe:
    """Validate and insert one swipe; RIGHT also bumps garment.like_count. Commits."""
    if direction not in SWIPE_DIRECTIONS:
        raise BadRequestError("Direction must be LEFT or RIGHT")
    garment = db.get(Garment, garment_id)
    if garment is None:
        raise NotFoundError("Garment not found")
    if garment.status != GARMENT_ACTIVE:
        raise BadRequestError("This garment is not available")
    if garment.owner_id == swiper_id:
        raise BadRequestError("Cannot swipe on your own garment")

    if find_swipe(db, swiper_id, garment_id) is not None:
        raise BadRequestError(MSG_ALREADY_SWIPED, code="ALREADY_SWIPED")

    row = Swipe(
        swiper_id=swiper_id,
        swiped_id=garment.owner_id,
        garment_id=garment_id,
        direction=direction,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        # Only a concurrent duplicate (uq_swipes_swiper_garment) is "already swiped"
        if find_swipe(db, swiper_id, garment_id) is None:
            raise
        raise BadRequestError(MSG_ALREADY_SWIPED, code="ALREADY_SWIPED")
    if direction == SWIPE_RIGHT:
        db.query(Garment).filter(Garment.id == garment_id).update(
            {Garment.like_count: Garment.like_count + 1}, synchronize_session=False
        )
    db.commit()
    db.refresh(row)
    logger.debug("Swipe %s: %s %s %s", row.id, swiper_id, direction, garment_id)
    return row


def swipe(
    db: Session,
    swiper_id: str,
    garment_id: str,
    direction: str,
    notifier: NotificationSink | None = None,
) -> SwipeResult:
    """Record a swipe and, for RIGHT, run the match engine exactly once."""
    row = record_swipe(db, swiper_id, garment_id, direction)
    if direction != SWIPE_RIGHT:
        return SwipeResult(swipe_id=row.id, is_match=False)
    outcome = evaluate_right_swipe(db, row, notifier)
    if not outcome.is_match:
        return SwipeResult(swipe_id=row.id, is_match=False)
    return SwipeResult(swipe_id=row.id, is_match=True, match_id=outcome.match.id)


def undo_last_swipe(db: Session, user_id: str) -> dict:
    """
    Delete the caller's most recent swipe if it is younger than UNDO_WINDOW_SECONDS.
    A RIGHT swipe gives its like back. Any match already formed from it is left in place.
    """
    last = (
        db.query(Swipe)
        .filter(Swipe.swiper_id == user_id)
        .order_by(Swipe.created_at.desc(), Swipe.id.desc())
        .first()
    )
    if last is None:
        raise NotFoundError("No swipes to undo")
    if as_utc(last.created_at) < undo_cutoff():
        raise BadRequestError(f"Can only undo swipes within {UNDO_WINDOW_SECONDS} seconds", code="UNDO_WINDOW_EXPIRED")

    swipe_id, garment_id, direction = last.id, last.garment_id, last.direction
    deleted = db.query(Swipe).filter(Swipe.id == swipe_id).delete(synchronize_session=False)
    if deleted == 0:
        # A concurrent undo got there first; nothing of ours to give back
        db.rollback()
        raise NotFoundError("No swipes to undo")
    if direction == SWIPE_RIGHT:
        db.query(Garment).filter(Garment.id == garment_id, Garment.like_count > 0).update(
            {Garment.like_count: Garment.like_count - 1}, synchronize_session=False
        )
    db.commit()
    db.expire_all()
    logger.debug("Undo swipe %s by %s", swipe_id, user_id)
    return {"undone": True}


def get_swipe_history(db: Session, user_id: str, direction: str | None = None) -> list[Swipe]:
    q = db.query(Swipe).filter(Swipe.swiper_id == user_id)
    if direction:
        if direction not in SWIPE_DIRECTIONS:
            raise BadRequestError("Direction must be LEFT or RIGHT")
        q = q.filter(Swipe.direction == direction)
    return q.order_by(Swipe.created_at.desc(), Swipe.id.desc()).limit(SWIPE_HISTORY_LIMIT).all()
