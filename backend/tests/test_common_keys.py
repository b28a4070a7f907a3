from __future__ import annotations

import unittest

from tests._bootstrap import bootstrap_backend_imports


bootstrap_backend_imports()

from indexrepair.common.keys import (  # noqa: E402
    build_composite_key,
    build_relation_key,
    build_vertex_key,
    encode_values,
)


class KeysTests(unittest.TestCase):
    def test_vertex_key_format(self) -> None:
        self.assertEqual(build_vertex_key(1), "v0000000000000001")
        self.assertEqual(build_relation_key(255), "r00000000000000ff")

    def test_composite_key_is_stable_per_index_and_values(self) -> None:
        key = build_composite_key("byName", ("alice",))

        self.assertEqual(key, build_composite_key("byName", ["alice"]))
        self.assertTrue(key.startswith("byName:"))
        self.assertNotEqual(key, build_composite_key("byName", ("bob",)))
        self.assertNotEqual(key, build_composite_key("byNick", ("alice",)))
        self.assertNotEqual(build_composite_key("byAge", (1,)), build_composite_key("byAge", ("1",)))

    def test_encode_values_is_compact(self) -> None:
        self.assertEqual(encode_values(["a", 1, {"b": 2, "a": 1}]), '["a",1,{"a":1,"b":2}]')
