# pvtracker/core/database.py

import os
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# DATABASE URL & ENGINE SETUP
# ---------------------------------------------------

DEFAULT_DATABASE_URL = "sqlite:///./polevault_tracker.db"

DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

# Convert old‐style “postgres://” URIs if necessary:
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)


def build_engine(url: str):
    """
    Create an engine for `url`.

    SQLite gets a single shared connection for in-memory databases so that
    every session sees the same tables; server databases get a pool.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


engine = build_engine(DATABASE_URL)

# ---------------------------------------------------
# SESSION FACTORY & BASE CLASS
# ---------------------------------------------------

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()


def make_session_factory(url: str) -> sessionmaker:
    """Engine + session factory for another database (tests, scripts)."""
    other = build_engine(url)
    return sessionmaker(autocommit=False, autoflush=False, bind=other)


def create_tables(bind=None) -> None:
    """Create every table registered on Base (idempotent)."""
    import pvtracker.db.models  # noqa: F401  (registers the tables)

    Base.metadata.create_all(bind=bind or engine)

# ---------------------------------------------------
# CONTEXT MANAGER FOR SESSIONS
# ---------------------------------------------------

@contextmanager
def get_db_session(factory: sessionmaker = None):
    """
    Context‐manager for SQLAlchemy sessions.
    Use like:
        with get_db_session() as db:
            ...
    """
    db = (factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()
