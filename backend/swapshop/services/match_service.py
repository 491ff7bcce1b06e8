"""
Match lifecycle: legal status transitions, garment proposals, reads and expiry.

    PENDING -> ACCEPTED -> NEGOTIATING -> COMPLETED
       |          |             |
       +----------+-------------+-----> CANCELLED
    COMPLETED, CANCELLED, EXPIRED are terminal.

Only the expiry job moves a match to EXPIRED (stale PENDING matches); it is not a caller transition.
"""
import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from swapshop.core.constants import (
    GARMENT_SWAPPED,
    MATCH_LIST_LIMIT,
    NOTIFY_SWAP_COMPLETED,
)
from swapshop.core.errors import BadRequestError, ForbiddenError, NotFoundError
from swapshop.db.base import utcnow
from swapshop.models.garment import Garment
from swapshop.models.match import Match
from swapshop.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)

PENDING = "PENDING"
ACCEPTED = "ACCEPTED"
NEGOTIATING = "NEGOTIATING"
COMPLETED = "COMPLETED"
CANCELLED = "CANCELLED"
EXPIRED = "EXPIRED"

MATCH_STATUSES = (PENDING, ACCEPTED, NEGOTIATING, COMPLETED, CANCELLED, EXPIRED)

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    PENDING: (ACCEPTED, CANCELLED),
    ACCEPTED: (NEGOTIATING, CANCELLED),
    NEGOTIATING: (COMPLETED, CANCELLED),
    COMPLETED: (),
    CANCELLED: (),
    EXPIRED: (),
}

TERMINAL_STATUSES = frozenset(s for s, nxt in ALLOWED_TRANSITIONS.items() if not nxt)
OPEN_STATUSES = (PENDING, ACCEPTED, NEGOTIATING)


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())


def is_participant(match: Match, user_id: str) -> bool:
    return user_id in (match.user1_id, match.user2_id)


def other_user_id(match: Match, user_id: str) -> str:
    return match.user2_id if match.user1_id == user_id else match.user1_id


def match_to_dict(m: Match, viewer_id: str | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": m.id,
        "user1_id": m.user1_id,
        "user2_id": m.user2_id,
        "garment1_id": m.garment1_id,
        "garment2_id": m.garment2_id,
        "status": m.status,
        "conversation_id": m.conversation.id if m.conversation else None,
        "created_at": m.created_at.isoformat() if m.created_at else None,
        "updated_at": m.updated_at.isoformat() if m.updated_at else None,
    }
    if viewer_id is not None and is_participant(m, viewer_id):
        out["other_user_id"] = other_user_id(m, viewer_id)
        if m.conversation and m.conversation.last_message_at:
            out["last_message_at"] = m.conversation.last_message_at.isoformat()
        else:
            out["last_message_at"] = None
    return out


def _load_for_participant(db: Session, match_id: str, user_id: str, action: str) -> Match:
    match = db.get(Match, match_id)
    if match is None:
        raise NotFoundError("Match not found")
    if not is_participant(match, user_id):
        raise ForbiddenError(f"Not authorized to {action} this match")
    return match


def get_match(db: Session, match_id: str, user_id: str) -> Match:
    return _load_for_participant(db, match_id, user_id, "view")


def list_matches(db: Session, user_id: str, limit: int = MATCH_LIST_LIMIT, offset: int = 0) -> list[Match]:
    """User's matches that are still alive or completed, most recently touched first."""
    return (
        db.query(Match)
        .filter(
            or_(Match.user1_id == user_id, Match.user2_id == user_id),
            Match.status.notin_((CANCELLED, EXPIRED)),
        )
        .order_by(Match.updated_at.desc(), Match.id)
        .offset(offset)
        .limit(min(limit, MATCH_LIST_LIMIT))
        .all()
    )


def get_stats(db: Session, user_id: str) -> dict[str, int]:
    mine = db.query(Match).filter(or_(Match.user1_id == user_id, Match.user2_id == user_id))
    return {
        "total_matches": mine.count(),
        "completed_swaps": mine.filter(Match.status == COMPLETED).count(),
        "pending_matches": mine.filter(Match.status.in_(OPEN_STATUSES)).count(),
    }


def update_status(
    db: Session,
    match_id: str,
    user_id: str,
    status: str,
    notifier: NotificationSink | None = None,
) -> Match:
    """
    Move a match along ALLOWED_TRANSITIONS. Reaching COMPLETED marks both garments SWAPPED
    in the same transaction and, after commit, notifies the other participant.
    """
    match = _load_for_participant(db, match_id, user_id, "update")
    current = match.status
    if not can_transition(current, status):
        raise BadRequestError(f"Cannot transition from {current} to {status}", code="INVALID_TRANSITION")

    # Compare-and-set on the status we validated against
    updated = (
        db.query(Match)
        .filter(Match.id == match_id, Match.status == current)
        .update({Match.status: status, Match.updated_at: utcnow()}, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise BadRequestError(f"Match is no longer {current}; reload and retry", code="STALE_STATUS")

    if status == COMPLETED:
        garment_ids = [g for g in (match.garment1_id, match.garment2_id) if g]
        if garment_ids:
            db.query(Garment).filter(Garment.id.in_(garment_ids)).update(
                {Garment.status: GARMENT_SWAPPED}, synchronize_session=False
            )
    db.commit()
    db.refresh(match)
    logger.info("Match %s: %s -> %s by %s", match_id, current, status, user_id)

    if status == COMPLETED and notifier is not None:
        notifier.notify(
            other_user_id(match, user_id),
            NOTIFY_SWAP_COMPLETED,
            "Swap completed!",
            "Your swap has been marked as completed",
            {"match_id": match_id},
        )
    return match


def propose_garment(db: Session, match_id: str, user_id: str, garment_id: str) -> Match:
    """Put one of the caller's own garments into the caller's slot, replacing any earlier proposal."""
    match = _load_for_participant(db, match_id, user_id, "update")
    garment = db.get(Garment, garment_id)
    if garment is None or garment.owner_id != user_id:
        raise BadRequestError("Invalid garment")
    if match.user1_id == user_id:
        match.garment1_id = garment_id
    else:
        match.garment2_id = garment_id
    match.updated_at = utcnow()
    db.commit()
    db.refresh(match)
    logger.info("Match %s: %s proposed garment %s", match_id, user_id, garment_id)
    return match


def expire_stale_matches(db: Session, older_than_days: int) -> int:
    """PENDING matches untouched for older_than_days become EXPIRED. Returns count."""
    cutoff = utcnow() - timedelta(days=older_than_days)
    expired = (
        db.query(Match)
        .filter(Match.status == PENDING, Match.updated_at < cutoff)
        .update({Match.status: EXPIRED, Match.updated_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return expired
