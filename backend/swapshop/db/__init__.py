from swapshop.db.base import Base
from swapshop.db.session import get_db, engine, SessionLocal
from swapshop.db.tables import ALL_TABLE_NAMES, RESETTABLE_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "RESETTABLE_TABLE_NAMES"]
