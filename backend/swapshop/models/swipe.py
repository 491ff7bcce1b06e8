"""One LEFT/RIGHT decision per (swiper, garment). swiped_id is the garment owner, denormalized for the reciprocal lookup."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.sql import func

from swapshop.db.base import Base, new_id, utcnow


class Swipe(Base):
    __tablename__ = "swipes"

    id = Column(String(36), primary_key=True, default=new_id)
    swiper_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    swiped_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    garment_id = Column(String(36), ForeignKey("garments.id", ondelete="CASCADE"), nullable=False)
    direction = Column(String(8), nullable=False)  # LEFT | RIGHT
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("swiper_id", "garment_id", name="uq_swipes_swiper_garment"),
        # reciprocal lookup: (swiper=B, swiped=A, RIGHT) ordered by created_at
        Index("ix_swipes_reciprocal", "swiper_id", "swiped_id", "direction", "created_at"),
        Index("ix_swipes_swiper_created", "swiper_id", "created_at"),
    )
