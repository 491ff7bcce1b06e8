from datetime import timedelta

import pytest

from swapshop.core.constants import DAILY_SUPER_LIKE_LIMIT, GARMENT_SWAPPED, NOTIFY_SUPER_LIKE
from swapshop.core.errors import BadRequestError, NotFoundError
from swapshop.core.marketplace_config import MAX_SUPER_LIKE_MESSAGE_LENGTH, start_of_quota_day
from swapshop.models.garment import Garment
from swapshop.models.notification import Notification
from swapshop.models.super_like import SuperLike
from swapshop.services import superlike_service
from swapshop.services.superlike_service import (
    get_received,
    get_remaining_today,
    get_sent,
    send_super_like,
)


def test_super_like_counts_and_notifies_owner(db, notifier, alice, bob, make_garment):
    g = make_garment(bob, "Vintage tee")
    row = send_super_like(db, alice.id, g.id, "  love this  ", notifier=notifier)

    assert row.receiver_id == bob.id
    assert row.message == "love this"
    assert db.get(Garment, g.id).super_like_count == 1
    note = db.query(Notification).filter(Notification.user_id == bob.id).one()
    assert note.type == NOTIFY_SUPER_LIKE
    assert "Vintage tee" in note.body
    assert note.payload["super_like_id"] == row.id


def test_daily_quota(db, alice, bob, make_garment):
    garments = [make_garment(bob, f"Item {i}") for i in range(DAILY_SUPER_LIKE_LIMIT + 1)]
    for g in garments[:DAILY_SUPER_LIKE_LIMIT]:
        send_super_like(db, alice.id, g.id)
    assert get_remaining_today(db, alice.id) == 0

    with pytest.raises(BadRequestError) as exc:
        send_super_like(db, alice.id, garments[-1].id)
    assert exc.value.code == "QUOTA_EXCEEDED"
    assert db.query(SuperLike).count() == DAILY_SUPER_LIKE_LIMIT
    assert db.get(Garment, garments[-1].id).super_like_count == 0


def test_yesterdays_super_likes_do_not_count(db, alice, bob, make_garment):
    yesterday = start_of_quota_day() - timedelta(hours=1)
    for i in range(DAILY_SUPER_LIKE_LIMIT):
        g = make_garment(bob, f"Old {i}")
        db.add(SuperLike(giver_id=alice.id, receiver_id=bob.id, garment_id=g.id, created_at=yesterday))
    db.commit()

    assert get_remaining_today(db, alice.id) == DAILY_SUPER_LIKE_LIMIT
    send_super_like(db, alice.id, make_garment(bob, "Fresh").id)
    assert get_remaining_today(db, alice.id) == DAILY_SUPER_LIKE_LIMIT - 1


def test_duplicate_super_like_rejected(db, alice, bob, make_garment):
    g = make_garment(bob)
    send_super_like(db, alice.id, g.id)
    with pytest.raises(BadRequestError) as exc:
        send_super_like(db, alice.id, g.id)
    assert exc.value.code == "ALREADY_SUPER_LIKED"
    assert db.get(Garment, g.id).super_like_count == 1


def test_cannot_super_like_own_garment(db, alice, make_garment):
    g = make_garment(alice)
    with pytest.raises(BadRequestError, match="own garment"):
        send_super_like(db, alice.id, g.id)


def test_message_length_limit(db, alice, bob, make_garment):
    g = make_garment(bob)
    with pytest.raises(BadRequestError):
        send_super_like(db, alice.id, g.id, "x" * (MAX_SUPER_LIKE_MESSAGE_LENGTH + 1))
    assert send_super_like(db, alice.id, g.id, "x" * MAX_SUPER_LIKE_MESSAGE_LENGTH).message


def test_unavailable_or_missing_garment(db, alice, bob, make_garment):
    with pytest.raises(NotFoundError):
        send_super_like(db, alice.id, "missing")
    swapped = make_garment(bob, status=GARMENT_SWAPPED)
    with pytest.raises(BadRequestError, match="not available"):
        send_super_like(db, alice.id, swapped.id)


def test_received_and_sent(db, alice, bob, carol, make_garment):
    g = make_garment(bob)
    send_super_like(db, alice.id, g.id)
    send_super_like(db, carol.id, g.id)

    assert {s.giver_id for s in get_received(db, bob.id)} == {alice.id, carol.id}
    assert [s.garment_id for s in get_sent(db, alice.id)] == [g.id]
    assert get_received(db, alice.id) == []


def test_duplicate_lost_at_insert_is_already_super_liked(db, alice, bob, make_garment, monkeypatch):
    g = make_garment(bob)
    send_super_like(db, alice.id, g.id)
    real_find = superlike_service.find_super_like
    calls = {"n": 0}

    def stale_then_real(session, giver_id, garment_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None  # the pre-check ran before the other send committed
        return real_find(session, giver_id, garment_id)

    monkeypatch.setattr(superlike_service, "find_super_like", stale_then_real)
    with pytest.raises(BadRequestError) as exc:
        send_super_like(db, alice.id, g.id)

    assert exc.value.code == "ALREADY_SUPER_LIKED"
    assert db.query(SuperLike).count() == 1
    db.expire_all()
    assert db.get(Garment, g.id).super_like_count == 1
    assert get_remaining_today(db, alice.id) == DAILY_SUPER_LIKE_LIMIT - 1
