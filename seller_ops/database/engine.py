import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from seller_ops.config import get_settings
from seller_ops.database.base import Base

logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30


def is_memory_sqlite(database_url) -> bool:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return False
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def _install_sqlite_pragmas(target: Engine, *, wal: bool) -> None:
    @event.listens_for(target, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout={}".format(_SQLITE_BUSY_TIMEOUT_SECONDS * 1000))
            if wal:
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                except sqlite3.DatabaseError:
                    logger.warning("SQLite WAL mode unavailable for %s", target.url.database)
        finally:
            cursor.close()


def build_engine(database_url: str) -> Engine:
    """Engine for ``database_url``; SQLite gets foreign keys and, on disk, WAL."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    memory = is_memory_sqlite(url)
    pool_kwargs = {"poolclass": StaticPool} if memory else {}
    sqlite_engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS},
        pool_pre_ping=True,
        **pool_kwargs,
    )
    _install_sqlite_pragmas(sqlite_engine, wal=not memory)
    return sqlite_engine


engine = build_engine(get_settings().DATABASE_URL)


def init_db(bind=None) -> None:
    from seller_ops.models import import_all_models

    import_all_models()
    Base.metadata.create_all(bind=bind or engine)
