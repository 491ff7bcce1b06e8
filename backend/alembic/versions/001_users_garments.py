"""Users and garments.

- users: identity only (auth is upstream); username unique.
- garments: listings with display counters; status DELETED is a soft delete.
Index ix_garments_status_created supports the discovery feed (ACTIVE, newest first).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=True),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "garments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(160), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("size", sa.String(16), nullable=True),
        sa.Column("category", sa.String(32), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("super_like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("like_count >= 0", name="ck_garments_like_count_non_negative"),
        sa.CheckConstraint("super_like_count >= 0", name="ck_garments_super_like_count_non_negative"),
    )
    op.create_index("ix_garments_owner_id", "garments", ["owner_id"], unique=False)
    op.create_index("ix_garments_status_created", "garments", ["status", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_garments_status_created", table_name="garments")
    op.drop_index("ix_garments_owner_id", table_name="garments")
    op.drop_table("garments")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
