"""
Marketplace rule config. .env is the source of truth; these defaults apply only when
the env var is unset. All values read at import time.

Env vars: UNDO_WINDOW_SECONDS, DAILY_SUPER_LIKE_LIMIT, SUPER_LIKE_DAY_TIMEZONE,
MAX_SUPER_LIKE_MESSAGE_LENGTH, MATCH_EXPIRY_DAYS (1–365),
NOTIFICATIONS_RETENTION_DAYS (7–90), SIDE_EFFECT_WORKERS (1–32).

In Docker, .env is not in the image; set these in docker-compose environment: or env_file:
so each environment can use different values.
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load backend/.env so scripts/tests/workers that import this module see the same values as main.py
_backend_dir = Path(__file__).resolve().parent.parent.parent
load_dotenv(_backend_dir / ".env", override=False)  # no-op if file missing

_log = logging.getLogger(__name__)


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


# -----------------------------------------------------------------------------
# Swipes and super-likes
# -----------------------------------------------------------------------------
UNDO_WINDOW_SECONDS = _int("UNDO_WINDOW_SECONDS", 5, min_val=1, max_val=60)
DAILY_SUPER_LIKE_LIMIT = _int("DAILY_SUPER_LIKE_LIMIT", 5, min_val=1, max_val=100)
MAX_SUPER_LIKE_MESSAGE_LENGTH = _int("MAX_SUPER_LIKE_MESSAGE_LENGTH", 200, min_val=1, max_val=200)
# Empty = server local time. The quota day starts at midnight in this zone.
SUPER_LIKE_DAY_TIMEZONE = os.environ.get("SUPER_LIKE_DAY_TIMEZONE", "").strip()

# -----------------------------------------------------------------------------
# Retention and background work
# -----------------------------------------------------------------------------
MATCH_EXPIRY_DAYS = _int("MATCH_EXPIRY_DAYS", 30, min_val=1, max_val=365)
NOTIFICATIONS_RETENTION_DAYS = _int("NOTIFICATIONS_RETENTION_DAYS", 30, min_val=7, max_val=90)
SIDE_EFFECT_WORKERS = _int("SIDE_EFFECT_WORKERS", 4, min_val=1, max_val=32)

# Log effective config at import so each environment can verify env vars are applied
_log.info(
    "Marketplace config (from env): undo_window_sec=%s daily_super_like_limit=%s "
    "super_like_tz=%s match_expiry_days=%s notifications_retention_days=%s side_effect_workers=%s",
    UNDO_WINDOW_SECONDS,
    DAILY_SUPER_LIKE_LIMIT,
    SUPER_LIKE_DAY_TIMEZONE or "local",
    MATCH_EXPIRY_DAYS,
    NOTIFICATIONS_RETENTION_DAYS,
    SIDE_EFFECT_WORKERS,
)


def quota_day_zone() -> tzinfo | None:
    """Zone whose midnight starts the super-like day. None = server local time."""
    if not SUPER_LIKE_DAY_TIMEZONE:
        return None
    try:
        return ZoneInfo(SUPER_LIKE_DAY_TIMEZONE)
    except ZoneInfoNotFoundError:
        _log.warning("Unknown SUPER_LIKE_DAY_TIMEZONE %r; using server local time", SUPER_LIKE_DAY_TIMEZONE)
        return None


def start_of_quota_day(now: datetime | None = None) -> datetime:
    """Most recent local midnight, as an aware UTC datetime (comparable with stored created_at)."""
    zone = quota_day_zone()
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(zone) if zone is not None else now.astimezone()
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def undo_cutoff(now: datetime | None = None) -> datetime:
    """Swipes created before this instant can no longer be undone."""
    return (now or datetime.now(timezone.utc)) - timedelta(seconds=UNDO_WINDOW_SECONDS)


@dataclass(frozen=True)
class MarketplaceConfig:
    """Snapshot of marketplace config for passing around (e.g. /health, tests)."""
    undo_window_seconds: int
    daily_super_like_limit: int
    super_like_day_timezone: str
    match_expiry_days: int
    notifications_retention_days: int
    side_effect_workers: int


def get_marketplace_config() -> MarketplaceConfig:
    return MarketplaceConfig(
        undo_window_seconds=UNDO_WINDOW_SECONDS,
        daily_super_like_limit=DAILY_SUPER_LIKE_LIMIT,
        super_like_day_timezone=SUPER_LIKE_DAY_TIMEZONE or "local",
        match_expiry_days=MATCH_EXPIRY_DAYS,
        notifications_retention_days=NOTIFICATIONS_RETENTION_DAYS,
        side_effect_workers=SIDE_EFFECT_WORKERS,
    )
