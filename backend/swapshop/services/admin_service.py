"""
Admin: wipe marketplace activity (swipes, super-likes, matches, chat, notifications) while keeping
users, garments and push tokens. Garment counters are zeroed so they agree with the empty ledger.
Tables: see swapshop.db.tables.RESETTABLE_TABLE_NAMES.
"""
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from swapshop.db.base import Base
from swapshop.db.tables import RESETTABLE_TABLE_NAMES
from swapshop.models.garment import Garment

logger = logging.getLogger(__name__)


def reset_marketplace(db: Session) -> dict[str, int]:
    """
    Empty RESETTABLE_TABLE_NAMES and zero garment counters. Returns dict of table -> deleted count
    (-1 when TRUNCATE was used and the count is unknown).
    Uses TRUNCATE for speed when possible; falls back to DELETE (children first) if not.
    """
    logger.info("reset_marketplace: starting")
    deleted: dict[str, int] = {}
    try:
        tables = ", ".join(RESETTABLE_TABLE_NAMES)
        db.execute(text(f"TRUNCATE TABLE {tables} RESTART IDENTITY CASCADE"))
        for t in RESETTABLE_TABLE_NAMES:
            deleted[t] = -1  # unknown count with TRUNCATE
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("reset_marketplace: TRUNCATE failed (%s), using DELETE", e)
        for t in RESETTABLE_TABLE_NAMES:
            deleted[t] = db.execute(Base.metadata.tables[t].delete()).rowcount
    db.query(Garment).update({Garment.like_count: 0, Garment.super_like_count: 0}, synchronize_session=False)
    db.commit()
    logger.info("reset_marketplace: done %s", deleted)
    return deleted
