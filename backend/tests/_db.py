from __future__ import annotations

from typing import Iterable

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests._bootstrap import bootstrap_backend_imports, reset_caches


bootstrap_backend_imports()


def make_engine() -> Engine:
    """Create an isolated SQLite in-memory graph storage with all tables created."""
    reset_caches()

    from indexrepair.database import create_schema  # noqa: E402

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    create_schema(engine)
    return engine


def make_session(engine: Engine | None = None) -> Session:
    SessionLocal = sessionmaker(bind=engine or make_engine(), future=True)
    return SessionLocal()


def make_graph(engine: Engine, search_backend: str = "sql"):
    """Graph over a shared engine; shutting it down keeps the in-memory data."""
    from indexrepair.backends.providers import build_index_provider
    from indexrepair.graph.graph import RepairGraph

    return RepairGraph(engine, index_provider=build_index_provider(search_backend), owns_engine=False)


def make_graph_factory(engine: Engine):
    """graph_factory for workers/jobs that reuses the test engine."""

    def factory(config):
        return make_graph(engine, config.search_backend)

    return factory


def add_vertices(db: Session, *vertex_ids: int, label: str = "person") -> None:
    from indexrepair.graph.models import Vertex

    for vertex_id in vertex_ids:
        db.add(Vertex(id=vertex_id, label=label))
    db.commit()


def add_relation_type(db: Session, name: str, category: str = "EDGE") -> None:
    from indexrepair.schema.models import RelationTypeDefinition

    db.add(RelationTypeDefinition(name=name, category=category))
    db.commit()


def add_index(
    db: Session,
    name: str,
    kind: str,
    *,
    status: str = "ENABLED",
    owner_type: str | None = None,
    direction: str = "BOTH",
    sort_keys: list[str] | None = None,
    element: str | None = None,
    fields: Iterable[tuple[str, str]] = (),
    backing_index: str | None = None,
    unique: bool = False,
    index_only: str | None = None,
):
    """Insert an index definition; `fields` are (key, status) pairs in order."""
    from indexrepair.schema.models import IndexDefinition, IndexField

    row = IndexDefinition(
        name=name,
        kind=kind,
        status=status,
        owner_type=owner_type,
        direction=direction,
        sort_keys=sort_keys,
        element=element,
        backing_index=backing_index,
        unique=unique,
        index_only=index_only,
    )
    row.fields = [IndexField(key=key, status=field_status, position=i) for i, (key, field_status) in enumerate(fields)]
    db.add(row)
    db.commit()
    return row
