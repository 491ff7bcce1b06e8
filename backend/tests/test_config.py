from datetime import datetime, timedelta, timezone

from swapshop.core.marketplace_config import (
    UNDO_WINDOW_SECONDS,
    _int,
    get_marketplace_config,
    start_of_quota_day,
    undo_cutoff,
)


def test_int_clamps_and_falls_back(monkeypatch):
    monkeypatch.setenv("SWAPSHOP_TEST_INT", "500")
    assert _int("SWAPSHOP_TEST_INT", 5, min_val=1, max_val=100) == 100
    monkeypatch.setenv("SWAPSHOP_TEST_INT", "oops")
    assert _int("SWAPSHOP_TEST_INT", 5) == 5
    monkeypatch.delenv("SWAPSHOP_TEST_INT")
    assert _int("SWAPSHOP_TEST_INT", 7) == 7


def test_quota_day_starts_within_last_24_hours():
    now = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)
    start = start_of_quota_day(now)
    assert start.tzinfo is not None
    assert now - timedelta(days=1) < start <= now


def test_quota_day_in_configured_zone(monkeypatch):
    monkeypatch.setattr("swapshop.core.marketplace_config.SUPER_LIKE_DAY_TIMEZONE", "America/New_York")
    # 02:00 UTC on Mar 10 is still Mar 9 in New York (UTC-4 after the DST switch)
    start = start_of_quota_day(datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc))
    assert start == datetime(2026, 3, 9, 4, 0, tzinfo=timezone.utc)


def test_undo_cutoff():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert undo_cutoff(now) == now - timedelta(seconds=UNDO_WINDOW_SECONDS)


def test_snapshot_matches_module_values():
    cfg = get_marketplace_config()
    assert cfg.undo_window_seconds == UNDO_WINDOW_SECONDS
    assert cfg.daily_super_like_limit >= 1
