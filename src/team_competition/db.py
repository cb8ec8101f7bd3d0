"""SQLite page store connection and schema management.

Pages live in ``pages.db`` under ``DATA_DIR`` (default ~/.team-competition).
``DATABASE_URL`` points the store at any other SQLAlchemy async URL instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.expanduser("~/.team-competition")
PAGES_DB_FILE = "pages.db"


def pages_db_path() -> Path:
    """Location of the SQLite page file. Nothing is created on disk here."""
    return Path(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR)) / PAGES_DB_FILE


def get_db_url() -> str:
    """Database URL for the page store.

    Only the default SQLite file needs its parent directory created; an
    explicit ``DATABASE_URL`` is used as given.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    db_path = pages_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{db_path}"


def _configure_sqlite(dbapi_connection, connection_record):
    """Per-connection SQLite settings: WAL so reads run during a page save,
    and a busy timeout for a second process sharing the page file."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


_engine = None
_session_factory = None


def get_engine():
    global _engine
    if _engine is None:
        url = get_db_url()
        _engine = create_async_engine(url, echo=False)
        if url.startswith("sqlite"):
            event.listen(_engine.sync_engine, "connect", _configure_sqlite)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def init_db():
    """Create the pages table if it does not exist."""
    from .sqlmodels import Base

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Page store ready at %s", engine.url.render_as_string(hide_password=True))


async def close_db():
    """Dispose of the engine so the next call reopens the page store."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
