import pytest
from sqlalchemy.exc import IntegrityError

from swapshop.core.constants import NOTIFY_NEW_MATCH, SWIPE_LEFT, SWIPE_RIGHT
from swapshop.models.conversation import Conversation
from swapshop.models.match import Match
from swapshop.models.notification import Notification
from swapshop.models.swipe import Swipe
from swapshop.services import match_engine
from swapshop.services.match_engine import CanonicalPair, canonical_pair, create_match_with_conversation
from swapshop.services.match_service import CANCELLED, PENDING, update_status
from swapshop.services.swipe_service import swipe


def test_canonical_pair_same_for_either_argument_order():
    forward = canonical_pair("u-2", "g-2", "u-1", "g-1")
    backward = canonical_pair("u-1", "g-1", "u-2", "g-2")
    assert forward == backward == CanonicalPair("u-1", "u-2", "g-1", "g-2")


def test_canonical_pair_rejects_same_user():
    with pytest.raises(ValueError):
        canonical_pair("u-1", "g-1", "u-1", "g-2")


def test_single_right_swipe_is_not_a_match(db, alice, bob, make_garment):
    g_bob = make_garment(bob)
    result = swipe(db, alice.id, g_bob.id, SWIPE_RIGHT)
    assert result.is_match is False
    assert result.match_id is None
    assert db.query(Match).count() == 0


@pytest.mark.parametrize("first_is_alice", [True, False])
def test_mutual_right_swipes_create_one_canonical_match(db, notifier, alice, bob, make_garment, first_is_alice):
    g_alice = make_garment(alice, "Linen shirt")
    g_bob = make_garment(bob, "Wool coat")
    steps = [(alice.id, g_bob.id), (bob.id, g_alice.id)]
    if not first_is_alice:
        steps.reverse()

    first = swipe(db, *steps[0], SWIPE_RIGHT, notifier=notifier)
    second = swipe(db, *steps[1], SWIPE_RIGHT, notifier=notifier)

    assert first.is_match is False
    assert second.is_match is True
    match = db.get(Match, second.match_id)
    assert (match.user1_id, match.user2_id) == (alice.id, bob.id)
    # each user's slot holds the garment they liked
    assert (match.garment1_id, match.garment2_id) == (g_bob.id, g_alice.id)
    assert match.status == PENDING
    assert db.query(Conversation).filter(Conversation.match_id == match.id).count() == 1

    notified = db.query(Notification).filter(Notification.type == NOTIFY_NEW_MATCH).all()
    assert sorted(n.user_id for n in notified) == [alice.id, bob.id]
    assert all(n.payload["match_id"] == match.id for n in notified)


def test_further_swipes_reuse_the_live_match(db, notifier, alice, bob, make_garment):
    g_alice = make_garment(alice)
    g_bob = make_garment(bob)
    g_bob_2 = make_garment(bob, "Silk scarf")
    swipe(db, alice.id, g_bob.id, SWIPE_RIGHT, notifier=notifier)
    created = swipe(db, bob.id, g_alice.id, SWIPE_RIGHT, notifier=notifier)

    again = swipe(db, alice.id, g_bob_2.id, SWIPE_RIGHT, notifier=notifier)

    assert again.is_match is True
    assert again.match_id == created.match_id
    assert db.query(Match).count() == 1
    assert db.query(Conversation).count() == 1
    # no second announcement
    assert db.query(Notification).filter(Notification.type == NOTIFY_NEW_MATCH).count() == 2


def test_left_swipe_never_matches(db, alice, bob, make_garment):
    g_alice = make_garment(alice)
    g_bob = make_garment(bob)
    swipe(db, bob.id, g_alice.id, SWIPE_RIGHT)
    result = swipe(db, alice.id, g_bob.id, SWIPE_LEFT)
    assert result.is_match is False
    assert db.query(Match).count() == 0


def test_reciprocal_garment_is_earliest_then_lowest_id(db, alice, bob, make_garment, set_created_at):
    g_alice_1 = make_garment(alice, "Boots", garment_id="g-alice-1")
    g_alice_2 = make_garment(alice, "Beanie", garment_id="g-alice-2")
    g_alice_3 = make_garment(alice, "Belt", garment_id="g-alice-3")
    g_bob = make_garment(bob)
    s2 = swipe(db, bob.id, g_alice_2.id, SWIPE_RIGHT).swipe_id
    s1 = swipe(db, bob.id, g_alice_1.id, SWIPE_RIGHT).swipe_id
    swipe(db, bob.id, g_alice_3.id, SWIPE_RIGHT)
    stamp = db.get(Swipe, s1).created_at
    # tie on created_at; the later Belt swipe never wins
    for swipe_id in (s1, s2):
        set_created_at(Swipe, swipe_id, stamp)
    db.query(Swipe).filter(Swipe.id == s1).update({Swipe.id: "0-first"}, synchronize_session=False)
    db.query(Swipe).filter(Swipe.id == s2).update({Swipe.id: "1-second"}, synchronize_session=False)
    db.commit()

    result = swipe(db, alice.id, g_bob.id, SWIPE_RIGHT)

    match = db.get(Match, result.match_id)
    assert (match.garment1_id, match.garment2_id) == (g_bob.id, g_alice_1.id)


def test_garment_slots_follow_who_liked_what(db, alice, bob, make_garment):
    g1 = make_garment(bob, "Denim jacket", garment_id="g1")
    g2 = make_garment(alice, "Knit sweater", garment_id="g2")
    assert swipe(db, alice.id, g1.id, SWIPE_RIGHT).is_match is False
    result = swipe(db, bob.id, g2.id, SWIPE_RIGHT)

    match = db.get(Match, result.match_id)
    assert (match.user1_id, match.user2_id) == ("a-alice", "b-bob")
    assert (match.garment1_id, match.garment2_id) == ("g1", "g2")


def test_cancelled_match_frees_the_pair(db, alice, bob, make_garment):
    g_alice = make_garment(alice)
    g_bob = make_garment(bob)
    g_alice_2 = make_garment(alice, "Cap")
    g_bob_2 = make_garment(bob, "Scarf")
    swipe(db, alice.id, g_bob.id, SWIPE_RIGHT)
    first = swipe(db, bob.id, g_alice.id, SWIPE_RIGHT)
    update_status(db, first.match_id, alice.id, CANCELLED)

    swipe(db, bob.id, g_alice_2.id, SWIPE_RIGHT)
    second = swipe(db, alice.id, g_bob_2.id, SWIPE_RIGHT)

    assert second.is_match is True
    assert second.match_id != first.match_id
    assert db.query(Match).filter(Match.status != CANCELLED).count() == 1


def test_lost_insert_race_returns_existing_match(db, alice, bob, make_garment, monkeypatch):
    g_alice = make_garment(alice)
    g_bob = make_garment(bob)
    pair = CanonicalPair(alice.id, bob.id, g_alice.id, g_bob.id)
    winner = create_match_with_conversation(db, pair).match

    real_find = match_engine.find_live_match
    calls = {"n": 0}

    def stale_then_real(session, user1_id, user2_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None  # what a concurrent request saw before the winner committed
        return real_find(session, user1_id, user2_id)

    monkeypatch.setattr(match_engine, "find_live_match", stale_then_real)
    outcome = create_match_with_conversation(db, pair)

    assert outcome.created is False
    assert outcome.match.id == winner.id
    assert db.query(Match).count() == 1
    assert db.query(Conversation).count() == 1


def test_partial_unique_index_rejects_second_live_match(db, alice, bob):
    db.add(Match(user1_id=alice.id, user2_id=bob.id, status=PENDING))
    db.commit()
    db.add(Match(user1_id=alice.id, user2_id=bob.id, status=PENDING))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    db.add(Match(user1_id=alice.id, user2_id=bob.id, status=CANCELLED))
    db.commit()
    assert db.query(Match).count() == 2
