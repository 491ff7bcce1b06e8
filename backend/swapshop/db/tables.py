"""
Single source of truth for database tables that exist after migrations (001–003).

Use these names when writing raw SQL (e.g. TRUNCATE). alembic/env.py asserts the
registered models match this list.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "users",
    "garments",
    "swipes",
    "super_likes",
    "matches",
    "conversations",
    "messages",
    "notifications",
    "push_tokens",
)

# Tables cleared by scripts/reset_marketplace.py. Children first so FKs never block.
RESETTABLE_TABLE_NAMES = (
    "messages",
    "conversations",
    "matches",
    "super_likes",
    "swipes",
    "notifications",
)
