"""
Expire stale matches: PENDING matches nobody accepted within MATCH_EXPIRY_DAYS become EXPIRED.

Runs every MATCH_EXPIRY_INTERVAL_MINUTES. Only CANCELLED frees a pair for a new match; an
EXPIRED row still counts for uq_matches_live_pair.
"""
import logging

from swapshop.core.constants import MATCH_EXPIRY_DAYS
from swapshop.db.session import SessionLocal
from swapshop.services.match_service import expire_stale_matches

logger = logging.getLogger(__name__)


def run_match_expiry_job() -> None:
    db = SessionLocal()
    try:
        expired = expire_stale_matches(db, MATCH_EXPIRY_DAYS)
        if expired:
            logger.info("Match expiry job: expired %s pending matches older than %s days", expired, MATCH_EXPIRY_DAYS)
        else:
            logger.debug("Match expiry job: nothing to expire")
    except Exception as e:
        logger.exception("Match expiry job failed: %s", e)
        db.rollback()
    finally:
        db.close()
