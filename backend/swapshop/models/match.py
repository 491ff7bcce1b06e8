"""Mutual-like pairing between two users.

user1_id < user2_id always (ascending id). On creation garment1_id is the garment user1 liked
(owned by user2) and garment2_id the one user2 liked; propose_garment later rewrites a
participant's slot with a garment of their own.
At most one non-cancelled match per pair, enforced by a partial unique index.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from swapshop.db.base import Base, new_id, utcnow


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=new_id)
    user1_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user2_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    garment1_id = Column(String(36), ForeignKey("garments.id", ondelete="SET NULL"), nullable=True)
    garment2_id = Column(String(36), ForeignKey("garments.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(16), nullable=False, default="PENDING", server_default="PENDING", index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="match", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index(
            "uq_matches_live_pair",
            "user1_id",
            "user2_id",
            unique=True,
            postgresql_where=text("status <> 'CANCELLED'"),
            sqlite_where=text("status <> 'CANCELLED'"),
        ),
    )
