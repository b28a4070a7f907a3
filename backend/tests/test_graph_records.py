from __future__ import annotations

import unittest

from tests._bootstrap import bootstrap_backend_imports, reset_caches


bootstrap_backend_imports()
reset_caches()

from indexrepair.common.keys import build_relation_key, build_vertex_key  # noqa: E402
from indexrepair.graph.elements import gather_elements, index_applies_to  # noqa: E402
from indexrepair.graph.records import GraphRecord, parse_record  # noqa: E402
from indexrepair.schema.types import Direction, ElementCategory  # noqa: E402

RAW = (
    '{"id": 7, "label": "person",'
    ' "properties": [{"id": 70, "key": "name", "value": "alice", "properties": {"source": "import"}},'
    '                {"id": 71, "key": "name", "value": "al"},'
    '                {"id": 72, "key": "nick", "value": null}],'
    ' "edges": [{"id": 80, "label": "knows", "out": 7, "in": 8, "properties": {"since": 2010}},'
    '           {"id": 81, "label": "knows", "out": 9, "in": 7}]}'
)


class ParseRecordTests(unittest.TestCase):
    def test_parse_json_text(self) -> None:
        record = parse_record(RAW)

        self.assertEqual(record.id, 7)
        self.assertEqual(len(record.properties), 3)
        self.assertEqual(record.edges[0].out_vertex_id, 7)
        self.assertEqual(record.edges[0].in_vertex_id, 8)
        self.assertEqual(len(list(record.relations())), 5)

    def test_parse_is_identity_for_records(self) -> None:
        record = parse_record(RAW)
        self.assertIs(parse_record(record), record)

    def test_mapping_and_bytes_inputs(self) -> None:
        self.assertIsInstance(parse_record({"id": 1}), GraphRecord)
        self.assertEqual(parse_record(b'{"id": 2}').id, 2)

    def test_direction_is_relative_to_record_vertex(self) -> None:
        record = parse_record(RAW)

        self.assertEqual(record.direction_of(record.edges[0]), Direction.OUT)
        self.assertEqual(record.direction_of(record.edges[1]), Direction.IN)
        self.assertEqual(record.direction_of(record.properties[0]), Direction.OUT)

    def test_records_are_immutable(self) -> None:
        record = parse_record(RAW)
        with self.assertRaises(Exception):
            record.id = 8


class GatherElementsTests(unittest.TestCase):
    def test_vertex_element_groups_multi_valued_fields(self) -> None:
        (element,) = gather_elements(parse_record(RAW), ElementCategory.VERTEX)

        self.assertEqual(element.key, build_vertex_key(7))
        self.assertEqual(element.label, "person")
        self.assertEqual(element.values("name"), ("alice", "al"))
        self.assertEqual(element.values("nick"), ())

    def test_property_elements_expose_value_and_meta_properties(self) -> None:
        elements = gather_elements(parse_record(RAW), ElementCategory.PROPERTY)

        self.assertEqual([e.key for e in elements], [build_relation_key(70), build_relation_key(71), build_relation_key(72)])
        self.assertEqual(elements[0].values("name"), ("alice",))
        self.assertEqual(elements[0].values("source"), ("import",))
        self.assertEqual(elements[2].values("nick"), ())

    def test_edge_elements_cover_both_directions(self) -> None:
        elements = gather_elements(parse_record(RAW), ElementCategory.EDGE)

        self.assertEqual([e.key for e in elements], [build_relation_key(80), build_relation_key(81)])
        self.assertEqual(elements[0].values("since"), (2010,))
        self.assertEqual(elements[0].label, "knows")

    def test_index_only_matches_label(self) -> None:
        (element,) = gather_elements(parse_record(RAW), ElementCategory.VERTEX)

        self.assertTrue(index_applies_to(None, element))
        self.assertTrue(index_applies_to("person", element))
        self.assertFalse(index_applies_to("company", element))
