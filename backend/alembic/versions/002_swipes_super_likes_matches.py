"""Swipes, super-likes, matches, conversations, messages.

Storage-level uniqueness (concurrent duplicates must fail in the database, not only in app checks):
- uq_swipes_swiper_garment: one swipe per (swiper, garment).
- uq_super_likes_giver_garment: one super-like per (giver, garment).
- uq_matches_live_pair: partial unique index, one non-CANCELLED match per ordered (user1, user2).
- conversations.match_id unique: one conversation per match.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "swipes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("swiper_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("swiped_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("garment_id", sa.String(36), sa.ForeignKey("garments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("swiper_id", "garment_id", name="uq_swipes_swiper_garment"),
    )
    op.create_index(
        "ix_swipes_reciprocal", "swipes", ["swiper_id", "swiped_id", "direction", "created_at"], unique=False
    )
    op.create_index("ix_swipes_swiper_created", "swipes", ["swiper_id", "created_at"], unique=False)

    op.create_table(
        "super_likes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("giver_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("receiver_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("garment_id", sa.String(36), sa.ForeignKey("garments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("giver_id", "garment_id", name="uq_super_likes_giver_garment"),
    )
    op.create_index("ix_super_likes_receiver_id", "super_likes", ["receiver_id"], unique=False)
    op.create_index("ix_super_likes_giver_created", "super_likes", ["giver_id", "created_at"], unique=False)

    op.create_table(
        "matches",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user1_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user2_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("garment1_id", sa.String(36), sa.ForeignKey("garments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("garment2_id", sa.String(36), sa.ForeignKey("garments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_matches_user1_id", "matches", ["user1_id"], unique=False)
    op.create_index("ix_matches_user2_id", "matches", ["user2_id"], unique=False)
    op.create_index("ix_matches_status", "matches", ["status"], unique=False)
    op.create_index(
        "uq_matches_live_pair",
        "matches",
        ["user1_id", "user2_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'CANCELLED'"),
        sqlite_where=sa.text("status <> 'CANCELLED'"),
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("match_id", sa.String(36), sa.ForeignKey("matches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("last_message_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", name="uq_conversations_match_id"),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "conversation_id", sa.String(36), sa.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("sender_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_messages_conversation_created", "messages", ["conversation_id", "created_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_messages_conversation_created", table_name="messages")
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_index("uq_matches_live_pair", table_name="matches")
    op.drop_index("ix_matches_status", table_name="matches")
    op.drop_index("ix_matches_user2_id", table_name="matches")
    op.drop_index("ix_matches_user1_id", table_name="matches")
    op.drop_table("matches")
    op.drop_index("ix_super_likes_giver_created", table_name="super_likes")
    op.drop_index("ix_super_likes_receiver_id", table_name="super_likes")
    op.drop_table("super_likes")
    op.drop_index("ix_swipes_swiper_created", table_name="swipes")
    op.drop_index("ix_swipes_reciprocal", table_name="swipes")
    op.drop_table("swipes")
