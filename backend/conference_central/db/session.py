# backend/conference_central/db/session.py
from __future__ import annotations

"""
Database engine, session factory and Base ORM declarations.

The engine and session factory are built once per process by
conference_central.main.create_app and stored on ``app.state``; nothing
here opens a connection at import time.

It is imported by:
- conference_central.models (for Base)
- conference_central.main (for build_engine/build_session_factory)
- API routes (via get_db / get_session_factory)
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all ORM models
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for DATABASE_URL (Postgres or SQLite)."""
    kwargs: dict = {"future": True}
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        # A memory database only lives as long as its single connection
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory used for request sessions and transactions.

    ``expire_on_commit`` is off so entities returned from a committed
    transaction can still be serialized after their session closes.
    """
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory


def get_db(request: Request):
    """
    FastAPI dependency that yields a DB session and ensures it is closed.

    Example usage in a route:
        from conference_central.db.session import get_db
        def endpoint(db: Session = Depends(get_db)): ...
    """
    db: Session = get_session_factory(request)()
    try:
        yield db
    finally:
        db.close()
