"""
Match API: list, stats, detail, status transitions, garment proposals.
"""
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id, get_notifier
from swapshop.core.constants import MATCH_LIST_LIMIT
from swapshop.db.session import get_db
from swapshop.services import match_service
from swapshop.services.match_service import match_to_dict
from swapshop.services.notification_service import NotificationSink

router = APIRouter()
logger = logging.getLogger(__name__)


class UpdateStatusRequest(BaseModel):
    # Any known status; PENDING and EXPIRED are rejected by the transition table with a 400
    status: Literal["PENDING", "ACCEPTED", "NEGOTIATING", "COMPLETED", "CANCELLED", "EXPIRED"]


class ProposeGarmentRequest(BaseModel):
    garment_id: str = Field(..., min_length=1, max_length=36)


@router.get("")
def list_matches(
    limit: int = Query(50, ge=1, le=MATCH_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    rows = match_service.list_matches(db, user_id, limit=limit, offset=offset)
    return {"matches": [match_to_dict(m, viewer_id=user_id) for m in rows]}


@router.get("/stats")
def match_stats(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return match_service.get_stats(db, user_id)


@router.get("/{match_id}")
def get_match(match_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return match_to_dict(match_service.get_match(db, match_id, user_id), viewer_id=user_id)


@router.patch("/{match_id}/status")
def update_match_status(
    match_id: str,
    body: UpdateStatusRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    notifier: NotificationSink = Depends(get_notifier),
) -> dict[str, Any]:
    match = match_service.update_status(db, match_id, user_id, body.status, notifier=notifier)
    return match_to_dict(match, viewer_id=user_id)


@router.post("/{match_id}/propose")
def propose_garment(
    match_id: str,
    body: ProposeGarmentRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    match = match_service.propose_garment(db, match_id, user_id, body.garment_id)
    return match_to_dict(match, viewer_id=user_id)
