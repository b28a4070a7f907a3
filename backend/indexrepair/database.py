from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from indexrepair.config import normalize_database_uri

Base = declarative_base()


def create_storage_engine(url: str) -> Engine:
    return create_engine(
        normalize_database_uri(url),
        pool_pre_ping=True,
        future=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )


def create_schema(engine: Engine) -> None:
    """Create every storage table on the given engine."""
    # Import models to register tables on Base.metadata before create_all().
    import indexrepair.graph.models  # noqa: F401
    import indexrepair.schema.models  # noqa: F401

    Base.metadata.create_all(engine)
