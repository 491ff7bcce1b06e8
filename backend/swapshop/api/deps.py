"""
Shared route dependencies: acting user, process-wide state from app.state.

Auth is handled upstream; the caller's id arrives as X-User-Id (or ?user_id=).
"""
from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session, sessionmaker

from swapshop.core.errors import UnauthorizedError
from swapshop.db.session import get_db
from swapshop.services.dispatcher import SideEffectDispatcher
from swapshop.services.notification_service import NotificationSink
from swapshop.services.realtime import RealtimeHub
from swapshop.services.user_service import touch_last_active, user_exists


def get_dispatcher(request: Request) -> SideEffectDispatcher:
    return request.app.state.dispatcher


def get_notifier(request: Request) -> NotificationSink:
    return request.app.state.notifier


def get_hub(request: Request) -> RealtimeHub:
    return request.app.state.hub


def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory


def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> str:
    uid = (x_user_id or user_id or "").strip()
    if not uid:
        raise UnauthorizedError("Missing X-User-Id")
    if not user_exists(db, uid):
        raise UnauthorizedError("Unknown user")
    dispatcher.submit("touch_last_active", touch_last_active, session_factory, uid)
    return uid
