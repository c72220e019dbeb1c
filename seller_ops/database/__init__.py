from seller_ops.database.base import Base
from seller_ops.database.engine import build_engine, engine, init_db
from seller_ops.database.session import SessionLocal, make_session_factory, session_scope

__all__ = [
    "Base",
    "build_engine",
    "engine",
    "init_db",
    "make_session_factory",
    "SessionLocal",
    "session_scope",
]
