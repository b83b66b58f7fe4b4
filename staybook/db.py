import logging
import sqlite3

from sqlalchemy import create_engine, event, Enum
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

logger = logging.getLogger(__name__)

class Base(DeclarativeBase):
    pass


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def _sqlite_unicode_lower(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII; city search compares lower(city)
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def enum_column_type(enum_cls, name: str) -> Enum:
    """Enum type that persists the lowercase enum values rather than member names."""
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e], validate_strings=True)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """
    Create missing tables for development and test environments.
    Production databases are migrated with alembic; this is a no-op there
    unless AUTO_CREATE_SCHEMA is set.
    """
    # Import models so every table is registered on Base.metadata
    from . import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Schema ensured on %s", bind.dialect.name)
