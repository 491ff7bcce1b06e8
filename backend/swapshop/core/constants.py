"""
Centralized constants for scheduler jobs and list endpoints (Encapsulate What Changes).

Change job IDs or intervals here instead of scattering literals across main and routes.
Rule tunables (undo window, super-like quota, retention) come from marketplace_config.
"""
from swapshop.core.marketplace_config import (
    DAILY_SUPER_LIKE_LIMIT,
    MATCH_EXPIRY_DAYS,
    NOTIFICATIONS_RETENTION_DAYS,
    UNDO_WINDOW_SECONDS,
)

# Scheduler job IDs (must match ids used in main.py add_job)
MATCH_EXPIRY_JOB_ID = "match_expiry"
NOTIFICATION_RETENTION_JOB_ID = "notification_retention"
MATCH_EXPIRY_INTERVAL_MINUTES = 60

# Garment states
GARMENT_ACTIVE = "ACTIVE"
GARMENT_SWAPPED = "SWAPPED"
GARMENT_RESERVED = "RESERVED"
GARMENT_INACTIVE = "INACTIVE"
GARMENT_DELETED = "DELETED"
GARMENT_STATUSES = (GARMENT_ACTIVE, GARMENT_SWAPPED, GARMENT_RESERVED, GARMENT_INACTIVE, GARMENT_DELETED)

# Swipe directions
SWIPE_LEFT = "LEFT"
SWIPE_RIGHT = "RIGHT"
SWIPE_DIRECTIONS = (SWIPE_LEFT, SWIPE_RIGHT)

# Notification kinds
NOTIFY_NEW_MATCH = "NEW_MATCH"
NOTIFY_NEW_MESSAGE = "NEW_MESSAGE"
NOTIFY_SUPER_LIKE = "SUPER_LIKE"
NOTIFY_SWAP_COMPLETED = "SWAP_COMPLETED"

# Scalability: hard caps so DB and response size stay bounded
SWIPE_HISTORY_LIMIT = 100
DISCOVERY_FEED_LIMIT = 50
MATCH_LIST_LIMIT = 100
MESSAGE_LIST_LIMIT = 200
NOTIFICATION_LIST_LIMIT = 200
MESSAGE_PREVIEW_CHARS = 100
