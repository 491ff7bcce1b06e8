"""Push notification registration: device tokens for match and message alerts."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id
from swapshop.db.base import utcnow
from swapshop.db.session import get_db
from swapshop.models.push_token import PushToken

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterPushBody(BaseModel):
    device_token: str = Field(..., min_length=1, max_length=256, description="APNs device token (hex string)")
    platform: str = Field(default="ios", pattern="^(ios|android)$")


@router.post("/push/register")
def register_push_token(
    body: RegisterPushBody,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Register a device for push notifications.
    Idempotent: same token is upserted (owner and updated_at refreshed, so a device that
    changes hands follows its latest user).
    """
    token_str = body.device_token.strip()
    existing = db.query(PushToken).filter(PushToken.device_token == token_str).first()
    if existing:
        existing.user_id = user_id
        existing.platform = body.platform
        existing.updated_at = utcnow()
        db.commit()
        return {"ok": True, "message": "Token already registered"}
    db.add(PushToken(user_id=user_id, device_token=token_str, platform=body.platform))
    db.commit()
    logger.info("Registered push token for user=%s platform=%s", user_id, body.platform)
    return {"ok": True, "message": "Token registered"}
