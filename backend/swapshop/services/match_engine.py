"""
Match engine: turns a committed RIGHT swipe into a Match + Conversation when the like is mutual.

Flow for "A swipes RIGHT on garment gB owned by B":
  1. Look for B's RIGHT swipe on any garment owned by A (earliest first, then lowest id).
  2. None: no match.
  3. Found (on gA): A is paired with gB and B with gA, the garment each of them liked; the
     two entries are then ordered by ascending user id (user1 -> garment1, user2 -> garment2).
  4. A live (non-cancelled) match for that ordered pair already exists: return it, no new
     rows, no notifications.
  5. Otherwise insert Match + Conversation in one transaction. The partial unique index
     uq_matches_live_pair is the real guard: if a concurrent request wins the insert we
     roll back and return the winner's row.
  6. After commit, notify both users (NEW_MATCH) and emit a realtime event, best-effort.

The swipe must already be committed before evaluate_right_swipe runs, so two simultaneous
reciprocal swipes can't both miss each other.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from swapshop.core.constants import NOTIFY_NEW_MATCH, SWIPE_RIGHT
from swapshop.models.conversation import Conversation
from swapshop.models.match import Match
from swapshop.models.swipe import Swipe
from swapshop.services.match_service import CANCELLED, PENDING
from swapshop.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanonicalPair:
    user1_id: str
    user2_id: str
    garment1_id: str | None
    garment2_id: str | None


@dataclass(frozen=True)
class MatchOutcome:
    match: Match | None
    created: bool

    @property
    def is_match(self) -> bool:
        return self.match is not None


NO_MATCH = MatchOutcome(match=None, created=False)


def canonical_pair(
    user_a: str,
    garment_a: str | None,
    user_b: str,
    garment_b: str | None,
) -> CanonicalPair:
    """Order two (user, liked garment) entries by ascending user id. Same result for either argument order."""
    if user_a == user_b:
        raise ValueError("A match needs two distinct users")
    if user_a < user_b:
        return CanonicalPair(user_a, user_b, garment_a, garment_b)
    return CanonicalPair(user_b, user_a, garment_b, garment_a)


def find_reciprocal_swipe(db: Session, swiper_id: str, owner_id: str) -> Swipe | None:
    """owner_id's RIGHT swipe on any garment of swiper_id. Earliest created wins; id breaks ties."""
    return (
        db.query(Swipe)
        .filter(
            Swipe.swiper_id == owner_id,
            Swipe.swiped_id == swiper_id,
            Swipe.direction == SWIPE_RIGHT,
        )
        .order_by(Swipe.created_at.asc(), Swipe.id.asc())
        .first()
    )


def find_live_match(db: Session, user1_id: str, user2_id: str) -> Match | None:
    """Non-cancelled match for an already-ordered pair."""
    return (
        db.query(Match)
        .filter(
            and_(
                Match.user1_id == user1_id,
                Match.user2_id == user2_id,
                Match.status != CANCELLED,
            )
        )
        .first()
    )


def create_match_with_conversation(db: Session, pair: CanonicalPair) -> MatchOutcome:
    """Insert Match + Conversation atomically, or return the live match for the pair."""
    existing = find_live_match(db, pair.user1_id, pair.user2_id)
    if existing is not None:
        return MatchOutcome(match=existing, created=False)

    match = Match(
        user1_id=pair.user1_id,
        user2_id=pair.user2_id,
        garment1_id=pair.garment1_id,
        garment2_id=pair.garment2_id,
        status=PENDING,
    )
    match.conversation = Conversation()
    db.add(match)
    try:
        db.commit()
    except IntegrityError:
        # Lost the race to a concurrent request for the same pair
        db.rollback()
        existing = find_live_match(db, pair.user1_id, pair.user2_id)
        if existing is None:
            raise
        logger.info("Match for %s/%s created concurrently; returning %s", pair.user1_id, pair.user2_id, existing.id)
        return MatchOutcome(match=existing, created=False)
    db.refresh(match)
    logger.info(
        "Match %s created: %s (%s) <-> %s (%s)",
        match.id, match.user1_id, match.garment1_id, match.user2_id, match.garment2_id,
    )
    return MatchOutcome(match=match, created=True)


def evaluate_right_swipe(db: Session, swipe: Swipe, notifier: NotificationSink | None = None) -> MatchOutcome:
    """Run the engine for a committed RIGHT swipe. Notifies only when a new match row was created."""
    if swipe.direction != SWIPE_RIGHT:
        return NO_MATCH
    reciprocal = find_reciprocal_swipe(db, swipe.swiper_id, swipe.swiped_id)
    if reciprocal is None:
        return NO_MATCH

    # each user goes with the garment they liked
    pair = canonical_pair(swipe.swiper_id, swipe.garment_id, swipe.swiped_id, reciprocal.garment_id)
    outcome = create_match_with_conversation(db, pair)
    if outcome.created and notifier is not None:
        _announce_match(notifier, outcome.match)
    return outcome


def _announce_match(notifier: NotificationSink, match: Match) -> None:
    conversation_id = match.conversation.id if match.conversation else None
    for user_id, other_id in ((match.user1_id, match.user2_id), (match.user2_id, match.user1_id)):
        data = {"match_id": match.id, "conversation_id": conversation_id, "other_user_id": other_id}
        notifier.notify(
            user_id,
            NOTIFY_NEW_MATCH,
            "New match!",
            "You matched on a garment you like",
            data,
        )
        notifier.emit(user_id, "match:new", data)
