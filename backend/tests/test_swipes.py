from datetime import timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from swapshop.core.constants import GARMENT_INACTIVE, SWIPE_LEFT, SWIPE_RIGHT, UNDO_WINDOW_SECONDS
from swapshop.core.errors import BadRequestError, NotFoundError
from swapshop.db.base import Base, utcnow
from swapshop.models.garment import Garment
from swapshop.models.match import Match
from swapshop.models.swipe import Swipe
from swapshop.models.user import User
from swapshop.services import swipe_service
from swapshop.services.swipe_service import get_swipe_history, record_swipe, swipe, undo_last_swipe


def test_right_swipe_bumps_like_count(db, alice, bob, make_garment):
    g = make_garment(bob)
    row = record_swipe(db, alice.id, g.id, SWIPE_RIGHT)
    db.refresh(g)
    assert row.swiped_id == bob.id
    assert g.like_count == 1


def test_left_swipe_leaves_like_count(db, alice, bob, make_garment):
    g = make_garment(bob)
    record_swipe(db, alice.id, g.id, SWIPE_LEFT)
    db.refresh(g)
    assert g.like_count == 0


def test_cannot_swipe_own_garment(db, alice, make_garment):
    g = make_garment(alice)
    with pytest.raises(BadRequestError, match="own garment"):
        record_swipe(db, alice.id, g.id, SWIPE_RIGHT)
    assert db.query(Swipe).count() == 0


@pytest.mark.parametrize("second_direction", [SWIPE_LEFT, SWIPE_RIGHT])
def test_second_swipe_on_same_garment_rejected(db, alice, bob, make_garment, second_direction):
    g = make_garment(bob)
    record_swipe(db, alice.id, g.id, SWIPE_LEFT)
    with pytest.raises(BadRequestError) as exc:
        record_swipe(db, alice.id, g.id, second_direction)
    assert exc.value.code == "ALREADY_SWIPED"
    assert db.query(Swipe).count() == 1


def test_unknown_garment_is_not_found(db, alice):
    with pytest.raises(NotFoundError):
        record_swipe(db, alice.id, "missing", SWIPE_RIGHT)


def test_inactive_garment_rejected(db, alice, bob, make_garment):
    g = make_garment(bob, status=GARMENT_INACTIVE)
    with pytest.raises(BadRequestError, match="not available"):
        record_swipe(db, alice.id, g.id, SWIPE_RIGHT)


def test_bad_direction_rejected(db, alice, bob, make_garment):
    g = make_garment(bob)
    with pytest.raises(BadRequestError):
        record_swipe(db, alice.id, g.id, "UP")


def test_undo_within_window_gives_like_back(db, alice, bob, make_garment):
    g = make_garment(bob)
    record_swipe(db, alice.id, g.id, SWIPE_RIGHT)

    assert undo_last_swipe(db, alice.id) == {"undone": True}

    assert db.query(Swipe).count() == 0
    assert db.get(Garment, g.id).like_count == 0
    with pytest.raises(NotFoundError):
        undo_last_swipe(db, alice.id)


def test_undo_only_takes_most_recent(db, alice, bob, make_garment):
    older = make_garment(bob, "Older")
    newer = make_garment(bob, "Newer")
    record_swipe(db, alice.id, older.id, SWIPE_RIGHT)
    record_swipe(db, alice.id, newer.id, SWIPE_LEFT)

    undo_last_swipe(db, alice.id)

    remaining = db.query(Swipe).all()
    assert [s.garment_id for s in remaining] == [older.id]


def test_undo_after_window_rejected(db, alice, bob, make_garment, set_created_at):
    g = make_garment(bob)
    row = record_swipe(db, alice.id, g.id, SWIPE_RIGHT)
    set_created_at(Swipe, row.id, utcnow() - timedelta(seconds=UNDO_WINDOW_SECONDS + 1))

    with pytest.raises(BadRequestError) as exc:
        undo_last_swipe(db, alice.id)
    assert exc.value.code == "UNDO_WINDOW_EXPIRED"
    assert db.query(Swipe).count() == 1
    assert db.get(Garment, g.id).like_count == 1


def test_undo_never_drives_like_count_negative(db, alice, bob, make_garment):
    g = make_garment(bob)
    record_swipe(db, alice.id, g.id, SWIPE_RIGHT)
    db.query(Garment).filter(Garment.id == g.id).update({Garment.like_count: 0}, synchronize_session=False)
    db.commit()

    undo_last_swipe(db, alice.id)

    assert db.get(Garment, g.id).like_count == 0


def test_undo_leaves_formed_match(db, alice, bob, make_garment):
    g_alice = make_garment(alice)
    g_bob = make_garment(bob)
    swipe(db, alice.id, g_bob.id, SWIPE_RIGHT)
    result = swipe(db, bob.id, g_alice.id, SWIPE_RIGHT)

    undo_last_swipe(db, bob.id)

    assert db.get(Match, result.match_id) is not None


def test_history_newest_first_and_filterable(db, alice, bob, make_garment, set_created_at):
    g1 = make_garment(bob, "One")
    g2 = make_garment(bob, "Two")
    first = record_swipe(db, alice.id, g1.id, SWIPE_RIGHT)
    record_swipe(db, alice.id, g2.id, SWIPE_LEFT)
    set_created_at(Swipe, first.id, utcnow() - timedelta(minutes=5))

    assert [s.garment_id for s in get_swipe_history(db, alice.id)] == [g2.id, g1.id]
    assert [s.garment_id for s in get_swipe_history(db, alice.id, SWIPE_RIGHT)] == [g1.id]
    with pytest.raises(BadRequestError):
        get_swipe_history(db, alice.id, "SIDEWAYS")


def _stale_lookup(real_find):
    """First call misses, as a request racing another one would; later calls hit the table."""
    calls = {"n": 0}

    def _find(session, *args):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(session, *args)

    return _find


def test_duplicate_lost_at_insert_is_already_swiped(db, alice, bob, make_garment, monkeypatch):
    g = make_garment(bob)
    record_swipe(db, alice.id, g.id, SWIPE_RIGHT)
    monkeypatch.setattr(swipe_service, "find_swipe", _stale_lookup(swipe_service.find_swipe))

    with pytest.raises(BadRequestError) as exc:
        record_swipe(db, alice.id, g.id, SWIPE_RIGHT)

    assert exc.value.code == "ALREADY_SWIPED"
    assert db.query(Swipe).count() == 1
    db.expire_all()
    assert db.get(Garment, g.id).like_count == 1


@pytest.fixture
def fk_db(tmp_path):
    """Separate database with SQLite foreign key enforcement switched on."""
    eng = create_engine(f"sqlite:///{tmp_path / 'fk.db'}", connect_args={"check_same_thread": False})

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    session = sessionmaker(autocommit=False, autoflush=False, bind=eng)()
    try:
        yield session
    finally:
        session.close()
        eng.dispose()


def test_unknown_swiper_is_not_reported_as_duplicate(fk_db):
    fk_db.add(User(id="b-bob", username="bob"))
    fk_db.add(Garment(id="g-1", owner_id="b-bob", title="Parka"))
    fk_db.commit()

    with pytest.raises(IntegrityError):
        record_swipe(fk_db, "ghost", "g-1", SWIPE_RIGHT)

    assert fk_db.query(Swipe).count() == 0
    assert fk_db.get(Garment, "g-1").like_count == 0
