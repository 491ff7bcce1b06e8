"""
Shared fixtures: a throwaway SQLite database per test, inline side effects, row factories.

Side effects run in the caller's thread (InlineDispatcher) so notifications are visible as soon
as the service call returns. APNs is replaced by a recorder.
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import swapshop.models  # noqa: F401  registers every table on Base.metadata
from swapshop.core.constants import GARMENT_ACTIVE
from swapshop.db.base import Base
from swapshop.db.session import get_db
from swapshop.models.garment import Garment
from swapshop.models.user import User
from swapshop.services.dispatcher import InlineDispatcher
from swapshop.services.notification_service import NotificationSink
from swapshop.services.realtime import RealtimeHub


class PushRecorder:
    def __init__(self):
        self.calls: list[tuple[list[str], str, str, dict | None]] = []

    def __call__(self, tokens, title, body, data=None) -> int:
        self.calls.append((list(tokens), title, body, data))
        return len(tokens)


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'swapshop.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher():
    return InlineDispatcher()


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def push_recorder():
    return PushRecorder()


@pytest.fixture
def notifier(session_factory, dispatcher, hub, push_recorder):
    return NotificationSink(session_factory, dispatcher, hub=hub, push_sender=push_recorder)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(user_id: str | None = None, username: str | None = None) -> User:
        counter["n"] += 1
        row = User(
            id=user_id,
            username=username or f"user{counter['n']}",
            display_name=(username or f"User {counter['n']}"),
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def make_garment(db):
    def _make(owner: User, title: str = "Denim jacket", status: str = GARMENT_ACTIVE, garment_id: str | None = None) -> Garment:
        row = Garment(id=garment_id, owner_id=owner.id, title=title, size="M", category="outerwear", status=status)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def set_created_at(db):
    """Backdate a row's created_at (undo window, quota day, retention)."""

    def _set(model, row_id: str, when: datetime, column: str = "created_at") -> None:
        db.query(model).filter(model.id == row_id).update({getattr(model, column): when}, synchronize_session=False)
        db.commit()
        db.expire_all()

    return _set


@pytest.fixture
def alice(make_user):
    # ids chosen so alice sorts before bob
    return make_user(user_id="a-alice", username="alice")


@pytest.fixture
def bob(make_user):
    return make_user(user_id="b-bob", username="bob")


@pytest.fixture
def carol(make_user):
    return make_user(user_id="c-carol", username="carol")


@pytest.fixture
def client(session_factory, dispatcher, hub, notifier):
    from swapshop.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.state.dispatcher = dispatcher
    app.state.hub = hub
    app.state.session_factory = session_factory
    app.state.notifier = notifier
    # No `with`: lifespan (scheduler, worker pool) stays off in tests
    yield TestClient(app)
    app.dependency_overrides.clear()
