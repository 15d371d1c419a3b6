"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db(), and that session is the only handle services
receive. Nothing holds a process-wide connection.
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from family_ledger.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# --- Engine ---
engine = create_engine(
    settings.DATABASE_URL,
    **_engine_options(settings.DATABASE_URL),
)

# --- Session Factory ---
# autocommit=False: the API layer decides when a unit of work is
# committed, so a balance update and its transaction row always
# land together or not at all.
# autoflush=False: services flush explicitly before querying
# rows they have just added.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even when
    the endpoint raises. Anything not committed by then is
    rolled back by close().
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
