"""Marketplace user. Auth lives outside this service; we only keep identity and activity."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from swapshop.db.base import Base, new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(64), nullable=False, unique=True, index=True)
    display_name = Column(String(128), nullable=True)
    last_active_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
