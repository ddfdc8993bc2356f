from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_session_factory(database_url: str):
    engine_args = {}
    if database_url.startswith("sqlite"):
        # sessions are opened from worker threads
        engine_args["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise each thread sees its own empty database
            engine_args["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=False, **engine_args)
    session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return engine, session_factory


def init_db(engine) -> None:
    # Importing the models registers their tables on Base.metadata
    from blogo.models import post_view  # noqa: F401

    Base.metadata.create_all(engine)
