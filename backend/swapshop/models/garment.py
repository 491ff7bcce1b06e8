"""Clothing listing. Soft delete keeps the row (status=DELETED) but hides it from discovery and swipes.

like_count / super_like_count are display counters owned by the swipe and super-like services.
"""
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import func

from swapshop.db.base import Base, new_id, utcnow


class Garment(Base):
    __tablename__ = "garments"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    size = Column(String(16), nullable=True)
    category = Column(String(32), nullable=True)
    status = Column(String(16), nullable=False, default="ACTIVE", server_default="ACTIVE")  # ACTIVE | SWAPPED | RESERVED | INACTIVE | DELETED
    like_count = Column(Integer, nullable=False, default=0, server_default="0")
    super_like_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_garments_like_count_non_negative"),
        CheckConstraint("super_like_count >= 0", name="ck_garments_super_like_count_non_negative"),
        Index("ix_garments_status_created", "status", "created_at"),
    )
