"""
Database session and engine.

Postgres in every deployed environment. A sqlite:/// DATABASE_URL is accepted for local
hacking: the partial unique index and the other constraints still apply, row locks do not.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from swapshop.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # request threads, dispatcher threads and the scheduler share connections
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 8,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_timeout": 30,
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
