"""
Database Configuration

SQLite file by default; any SQLAlchemy URL (e.g. PostgreSQL) works.
"""
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from ..api.config import Config

# Base class for models
Base = declarative_base()

_MEMORY_URLS = ('sqlite://', 'sqlite:///:memory:')


def is_sqlite(url: str) -> bool:
    return url.startswith('sqlite')


def create_db_engine(url: Optional[str] = None) -> Engine:
    """Create an engine for `url` (default: Config.DATABASE_URL)"""
    url = url or Config.DATABASE_URL

    if is_sqlite(url):
        if url not in _MEMORY_URLS:
            # Create database directory if using a SQLite file
            db_path = Path(url.replace('sqlite:///', '', 1))
            db_path.parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
            echo=Config.DEBUG
        )

    return create_engine(url, pool_pre_ping=True, echo=Config.DEBUG)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def init_db(engine: Engine):
    """Initialize the database (create all tables)"""
    # Import all models to register them with Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
