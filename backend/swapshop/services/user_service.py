"""
Users: identity rows the marketplace hangs listings, swipes and matches on.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from swapshop.core.errors import BadRequestError, NotFoundError
from swapshop.db.base import utcnow
from swapshop.models.user import User

logger = logging.getLogger(__name__)


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "display_name": u.display_name,
        "last_active_at": u.last_active_at.isoformat() if u.last_active_at else None,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


def create_user(db: Session, username: str, display_name: str | None = None) -> User:
    username = (username or "").strip()
    if not username:
        raise BadRequestError("username is required")
    row = User(username=username, display_name=(display_name or "").strip() or None)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BadRequestError("Username already taken", code="DUPLICATE_USERNAME")
    db.refresh(row)
    logger.info("Created user %s (%s)", row.id, row.username)
    return row


def get_user(db: Session, user_id: str) -> User:
    row = db.get(User, user_id)
    if row is None:
        raise NotFoundError("User not found")
    return row


def user_exists(db: Session, user_id: str) -> bool:
    return db.query(User.id).filter(User.id == user_id).first() is not None


def touch_last_active(session_factory: sessionmaker, user_id: str) -> None:
    """Best-effort last-active stamp; runs on the dispatcher in its own session."""
    db = session_factory()
    try:
        db.query(User).filter(User.id == user_id).update(
            {User.last_active_at: utcnow()}, synchronize_session=False
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
