"""Daily prune of read notifications older than NOTIFICATIONS_RETENTION_DAYS."""
import logging

from swapshop.core.constants import NOTIFICATIONS_RETENTION_DAYS
from swapshop.db.session import SessionLocal
from swapshop.services.notification_service import prune_read_notifications

logger = logging.getLogger(__name__)


def run_notification_retention_job() -> None:
    db = SessionLocal()
    try:
        deleted = prune_read_notifications(db, NOTIFICATIONS_RETENTION_DAYS)
        logger.info("Notification retention: deleted %s read notifications older than %s days", deleted, NOTIFICATIONS_RETENTION_DAYS)
    except Exception as e:
        logger.exception("Notification retention job failed: %s", e)
        db.rollback()
    finally:
        db.close()
