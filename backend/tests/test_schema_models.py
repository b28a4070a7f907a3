from __future__ import annotations

import unittest
from unittest.mock import patch

from tests._bootstrap import bootstrap_backend_imports, reset_caches
from tests._db import add_index, add_relation_type, add_vertices, make_engine, make_session


bootstrap_backend_imports()
reset_caches()

from indexrepair.backends.providers import NoopIndexProvider  # noqa: E402
from indexrepair.errors import SchemaLookupError, UnsupportedIndexKindError  # noqa: E402
from indexrepair.graph.models import Vertex  # noqa: E402
from indexrepair.schema.management import ManagementSystem  # noqa: E402
from indexrepair.schema.types import (  # noqa: E402
    Direction,
    ElementCategory,
    MixedIndexDescriptor,
    RelationTypeIndexDescriptor,
    SchemaStatus,
)


class SchemaTypesTests(unittest.TestCase):
    def test_direction_from_position(self) -> None:
        self.assertEqual(Direction.from_position(0), Direction.OUT)
        self.assertEqual(Direction.from_position(1), Direction.IN)
        with self.assertRaises(ValueError):
            Direction.from_position(2)

    def test_relation_index_covers_positions(self) -> None:
        both = RelationTypeIndexDescriptor(name="i", owner_type="knows")
        out = RelationTypeIndexDescriptor(name="i", owner_type="knows", direction=Direction.OUT)

        self.assertEqual([both.covers_position(p) for p in (0, 1)], [True, True])
        self.assertEqual([out.covers_position(p) for p in (0, 1)], [True, False])


class ManagementSystemTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = make_session(self.engine)
        self.mgmt = ManagementSystem(make_session(self.engine), index_provider=NoopIndexProvider())

    def tearDown(self) -> None:
        self.mgmt.rollback()
        self.db.close()
        self.engine.dispose()

    def test_graph_and_relation_indexes_are_looked_up_separately(self) -> None:
        add_relation_type(self.db, "knows")
        add_index(self.db, "shared", "RelationTypeIndex", owner_type="knows")
        add_index(self.db, "shared", "CompositeIndex", element="VERTEX", fields=[("name", "ENABLED")])

        graph_index = self.mgmt.get_graph_index("shared")
        relation_index = self.mgmt.get_relation_index(self.mgmt.get_relation_type("knows"), "shared")

        self.assertEqual(graph_index.kind.value, "CompositeIndex")
        self.assertEqual(relation_index.kind.value, "RelationTypeIndex")
        self.assertIsNone(self.mgmt.get_graph_index("missing"))

    def test_field_statuses_follow_field_order(self) -> None:
        add_index(
            self.db,
            "search",
            "MixedIndex",
            element="EDGE",
            backing_index="search1",
            fields=[("b", "ENABLED"), ("a", "DISABLED")],
        )

        index = self.mgmt.get_graph_index("search")

        self.assertIsInstance(index, MixedIndexDescriptor)
        self.assertEqual(index.element, ElementCategory.EDGE)
        self.assertEqual(index.field_keys, ("b", "a"))
        self.assertEqual(
            list(self.mgmt.get_field_statuses(index).items()),
            [("b", SchemaStatus.ENABLED), ("a", SchemaStatus.DISABLED)],
        )

    def test_unknown_index_kind_is_rejected(self) -> None:
        add_index(self.db, "odd", "SpatialIndex")

        with self.assertRaises(UnsupportedIndexKindError):
            self.mgmt.get_graph_index("odd")

    def test_missing_relation_type_raises_on_strict_lookup(self) -> None:
        self.assertIsNone(self.mgmt.get_relation_type("likes"))
        with self.assertRaises(SchemaLookupError):
            self.mgmt.wrapped_tx.get_relation_type("likes")

    def test_rollback_after_commit_is_a_no_op(self) -> None:
        self.mgmt.commit()
        self.mgmt.rollback()
        self.assertFalse(self.mgmt.open)

    def test_failed_commit_rolls_back_and_closes(self) -> None:
        with patch.object(self.mgmt.db, "commit", side_effect=RuntimeError("disk full")), patch.object(
            self.mgmt.db, "rollback"
        ) as rollback:
            with self.assertRaises(RuntimeError):
                self.mgmt.commit()

        rollback.assert_called_once()
        self.assertFalse(self.mgmt.open)

    def test_cleared_vertex_cache_sees_deleted_vertices(self) -> None:
        add_vertices(self.db, 7)
        tx = self.mgmt.wrapped_tx
        self.assertEqual(tx.get_vertex(7).id, 7)

        tx.db.delete(tx.db.get(Vertex, 7))
        tx.db.flush()
        self.assertIsNotNone(tx.get_vertex(7))

        tx.clear_vertex_cache()
        self.assertIsNone(tx.get_vertex(7))
