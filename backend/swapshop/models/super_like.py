"""Rate-limited, higher-signal like with an optional message. At most one per (giver, garment)."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.sql import func

from swapshop.db.base import Base, new_id, utcnow


class SuperLike(Base):
    __tablename__ = "super_likes"

    id = Column(String(36), primary_key=True, default=new_id)
    giver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    garment_id = Column(String(36), ForeignKey("garments.id", ondelete="CASCADE"), nullable=False)
    message = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("giver_id", "garment_id", name="uq_super_likes_giver_garment"),
        # daily quota count: giver_id + created_at >= local midnight
        Index("ix_super_likes_giver_created", "giver_id", "created_at"),
    )
