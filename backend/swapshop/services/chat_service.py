"""
Conversations: messages between the two participants of a match.
"""
import logging
from typing import Any

from sqlalchemy.orm import Session

from swapshop.core.constants import MESSAGE_LIST_LIMIT, MESSAGE_PREVIEW_CHARS, NOTIFY_NEW_MESSAGE
from swapshop.core.errors import BadRequestError, ForbiddenError, NotFoundError
from swapshop.db.base import utcnow
from swapshop.models.conversation import Conversation, Message
from swapshop.services.match_service import CANCELLED, EXPIRED, is_participant, other_user_id
from swapshop.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def message_to_dict(m: Message) -> dict[str, Any]:
    return {
        "id": m.id,
        "conversation_id": m.conversation_id,
        "sender_id": m.sender_id,
        "content": m.content,
        "is_read": bool(m.is_read),
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }


def get_conversation(db: Session, conversation_id: str, user_id: str) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if not is_participant(conversation.match, user_id):
        raise ForbiddenError("Not authorized to view this conversation")
    return conversation


def send_message(
    db: Session,
    conversation_id: str,
    sender_id: str,
    content: str,
    notifier: NotificationSink | None = None,
) -> Message:
    content = (content or "").strip()
    if not content:
        raise BadRequestError("Message content is required")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise BadRequestError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")
    conversation = get_conversation(db, conversation_id, sender_id)
    match = conversation.match
    if match.status in (CANCELLED, EXPIRED):
        raise BadRequestError("This conversation is closed")
    recipient_id = other_user_id(match, sender_id)

    row = Message(conversation_id=conversation_id, sender_id=sender_id, content=content)
    db.add(row)
    conversation.last_message_at = utcnow()
    db.commit()
    db.refresh(row)

    if notifier is not None:
        payload = message_to_dict(row)
        notifier.emit(recipient_id, "message:new", payload)
        notifier.notify(
            recipient_id,
            NOTIFY_NEW_MESSAGE,
            "New message",
            content[:MESSAGE_PREVIEW_CHARS],
            {"conversation_id": conversation_id, "message_id": row.id, "sender_id": sender_id},
        )
    return row


def list_messages(db: Session, conversation_id: str, user_id: str, limit: int = 50) -> list[Message]:
    """Latest messages, returned oldest first."""
    get_conversation(db, conversation_id, user_id)
    rows = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(min(limit, MESSAGE_LIST_LIMIT))
        .all()
    )
    rows.reverse()
    return rows


def mark_read(db: Session, conversation_id: str, user_id: str) -> int:
    """Mark the other participant's messages read. Returns count."""
    get_conversation(db, conversation_id, user_id)
    updated = (
        db.query(Message)
        .filter(
            Message.conversation_id == conversation_id,
            Message.sender_id != user_id,
            Message.is_read.is_(False),
        )
        .update({Message.is_read: True, Message.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated
