"""Database session management with connection pooling"""

from typing import Any, Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from cerebral_finance.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Pool settings per backend.

    Postgres gets a small pre-pinged pool recycled hourly. SQLite (local
    development) is file-backed and shared across FastAPI's worker threads.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 5,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; callers commit, the session is always closed"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
