"""Graph connection: storage engine, serializers and administrative transactions."""
from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from indexrepair.backends.providers import IndexProvider, build_index_provider
from indexrepair.database import create_storage_engine, make_session_factory
from indexrepair.errors import RepairConfigError
from indexrepair.graph.serializer import EdgeSerializer, IndexSerializer
from indexrepair.schema.management import ManagementSystem

logger = logging.getLogger(__name__)


class RepairGraph:
    """An open graph backed by one storage engine."""

    def __init__(self, engine: Engine, *, index_provider: IndexProvider, owns_engine: bool = True) -> None:
        self.engine = engine
        self.index_provider = index_provider
        self.owns_engine = owns_engine
        self.session_factory = make_session_factory(engine)
        self.edge_serializer = EdgeSerializer()
        self.index_serializer = IndexSerializer()
        self.is_open = True

    def open_management(self) -> ManagementSystem:
        if not self.is_open:
            raise RuntimeError("graph has been shut down")
        return ManagementSystem(self.session_factory(), index_provider=self.index_provider)

    def shutdown(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        if self.owns_engine:
            self.engine.dispose()
        logger.info("graph shut down (url=%s)", self.engine.url.render_as_string(hide_password=True))

    def __repr__(self) -> str:
        return f"RepairGraph({self.engine.url.render_as_string(hide_password=True)})"


def open_graph(config) -> RepairGraph:
    """Open the graph described by a RepairJobConfig.

    Raises:
        RepairConfigError: If the storage URL or search backend is missing/invalid
    """
    url = (config.storage_url or "").strip()
    if not url:
        raise RepairConfigError("Graph storage URL is not configured (indexrepair.storage.url)")

    provider = build_index_provider(config.search_backend)
    engine = create_storage_engine(url)
    graph = RepairGraph(engine, index_provider=provider)
    logger.info("opened graph %s (search_backend=%s)", graph, provider.name)
    return graph
