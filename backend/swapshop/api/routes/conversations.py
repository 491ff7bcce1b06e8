"""Conversation API: messages between the two participants of a match."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.api.deps import get_current_user_id, get_notifier
from swapshop.core.constants import MESSAGE_LIST_LIMIT
from swapshop.db.session import get_db
from swapshop.services import chat_service
from swapshop.services.chat_service import MAX_MESSAGE_LENGTH, message_to_dict
from swapshop.services.notification_service import NotificationSink

router = APIRouter()
logger = logging.getLogger(__name__)


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)


@router.get("/{conversation_id}/messages")
def list_messages(
    conversation_id: str,
    limit: int = Query(50, ge=1, le=MESSAGE_LIST_LIMIT),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    rows = chat_service.list_messages(db, conversation_id, user_id, limit=limit)
    return {"messages": [message_to_dict(m) for m in rows]}


@router.post("/{conversation_id}/messages", status_code=status.HTTP_201_CREATED)
def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    notifier: NotificationSink = Depends(get_notifier),
) -> dict[str, Any]:
    row = chat_service.send_message(db, conversation_id, user_id, body.content, notifier=notifier)
    return message_to_dict(row)


@router.post("/{conversation_id}/read")
def mark_conversation_read(
    conversation_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    return {"ok": True, "marked_count": chat_service.mark_read(db, conversation_id, user_id)}
