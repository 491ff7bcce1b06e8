"""
Garment API: list a garment, discovery feed, detail, owner status changes, soft delete.
"""
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id
from swapshop.core.constants import DISCOVERY_FEED_LIMIT
from swapshop.db.session import get_db
from swapshop.services import garment_service
from swapshop.services.garment_service import garment_to_dict

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateGarmentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    description: str | None = Field(None, max_length=4000)
    size: str | None = Field(None, max_length=16)
    category: str | None = Field(None, max_length=32)


class UpdateGarmentStatusRequest(BaseModel):
    status: Literal["ACTIVE", "RESERVED", "INACTIVE", "SWAPPED"]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_garment(
    body: CreateGarmentRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    row = garment_service.create_garment(
        db, user_id, body.title, description=body.description, size=body.size, category=body.category
    )
    return garment_to_dict(row)


@router.get("/feed")
def discovery_feed(
    limit: int = Query(20, ge=1, le=DISCOVERY_FEED_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Swipeable garments: ACTIVE, not yours, not swiped yet. Newest first."""
    rows = garment_service.discovery_feed(db, user_id, limit=limit, offset=offset)
    return {"garments": [garment_to_dict(g) for g in rows]}


@router.get("/mine")
def my_garments(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return {"garments": [garment_to_dict(g) for g in garment_service.list_user_garments(db, user_id)]}


@router.get("/{garment_id}")
def get_garment(garment_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return garment_to_dict(garment_service.get_garment(db, garment_id))


@router.patch("/{garment_id}/status")
def update_garment_status(
    garment_id: str,
    body: UpdateGarmentStatusRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    return garment_to_dict(garment_service.update_garment_status(db, garment_id, user_id, body.status))


@router.delete("/{garment_id}")
def delete_garment(
    garment_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    garment_service.delete_garment(db, garment_id, user_id)
    return {"ok": True, "id": garment_id}
