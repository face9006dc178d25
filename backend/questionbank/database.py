"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` (MySQL through PyMySQL by default) and provides
the per-request session dependency used by the application. Tests swap
the engine out by overriding `get_session`.
"""

from sqlmodel import SQLModel, create_engine, Session

from .config import settings
from . import models  # noqa: F401  (registers tables on SQLModel.metadata)


def build_engine(url: str):
    """Create an engine with a pre-pinged connection pool.

    SQLite URLs get `check_same_thread=False` because FastAPI serves
    sync endpoints from a thread pool.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind=None):
    """Create any missing tables using SQLModel metadata.

    Existing tables are left untouched; there is no migration support.
    """
    SQLModel.metadata.create_all(bind if bind is not None else engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
