from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker

from seller_ops.database.engine import engine


def make_session_factory(bind) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
    )


SessionLocal = make_session_factory(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for jobs and scripts running outside a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
