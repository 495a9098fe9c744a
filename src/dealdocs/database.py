"""Database session factory and configuration.

Provides connectivity to the document registry store. The engine is created
lazily from settings so importing the application never opens a connection
or requires a driver for a database that isn't used.
"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings
from .models.base import Base


def build_engine(database_url: str) -> Engine:
    """Create an engine for database_url.

    Pool settings only apply to server databases (not SQLite).
    """
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,
    }

    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(database_url, **engine_kwargs)


@lru_cache()
def get_engine() -> Engine:
    return build_engine(get_settings().DATABASE_URL)


@lru_cache()
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db(engine: Engine = None) -> None:
    """Create registry tables that don't exist yet.

    Deal tables are normally provisioned by the deal management service;
    this is meant for local development and tests.
    """
    Base.metadata.create_all(bind=engine or get_engine())


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/deals")
        def list_deals(db: Session = Depends(get_db)):
            return db.query(Deal).all()
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
