"""
Engine, session factory and declarative base for the job board.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from .config import settings


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """
    Create an engine for *url*.

    SQLite engines get foreign keys switched on per connection, and an
    in-memory URL shares one connection so every session sees the same
    tables.
    """
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    eng = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(eng, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


engine = build_engine(settings.database_url, echo=settings.sql_echo)

# Listing requests only read; one session per request via SqlUnitOfWork
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """
    Create all tables on *bind* (the application engine by default).
    """
    # Register every model on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
