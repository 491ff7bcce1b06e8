"""User notification: persisted read state and type-specific payload.

user_id: who receives.
type: notification kind (NEW_MATCH, NEW_MESSAGE, SUPER_LIKE, SWAP_COMPLETED) for filtering.
read_at: NULL = unread; set when user marks as read (persisted across devices).
data: JSON payload (match_id, garment_id, ...), column name 'data' in DB.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.sql import func

from swapshop.db.base import Base, JSONPayload, new_id, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(32), nullable=False, index=True)
    title = Column(String(160), nullable=False)
    body = Column(Text, nullable=False)
    payload = Column("data", JSONPayload, nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False, server_default="false")
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),)
