from seller_ops.database import build_engine, init_db, make_session_factory


def make_test_session_factory():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    return make_session_factory(engine)
