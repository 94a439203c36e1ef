import json
import os
import tempfile
import unittest

import zstandard as zstd

from rsz_test_utils import ARRAY_HASH, REF_HASH, SCHEMA, SIMPLE_HASH, UNKNOWN_HASH

from rszkit.rsz.rsz_data_types import TypeTag
from rszkit.rsz.rsz_errors import SchemaLookupFailure, UnrecognizedTypeTag
from rszkit.utils.type_registry import TypeRegistry


class TestTypeRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = TypeRegistry.from_dict(SCHEMA)

    def test_lookup_class(self):
        schema = self.registry.lookup_class(SIMPLE_HASH)
        self.assertEqual(schema.name, "app.Simple")
        self.assertEqual([f.name for f in schema.fields], ["Enabled", "Count", "Name"])
        self.assertEqual(schema.fields[1].type, TypeTag.S32)
        self.assertEqual(schema.fields[2].type, TypeTag.STRING)
        self.assertEqual(self.registry.field_count(SIMPLE_HASH), 3)

    def test_zero_padded_key_fallback(self):
        self.assertEqual(self.registry.lookup_class(REF_HASH).name, "app.Refs")
        self.assertIsNotNone(self.registry.get_type_info(REF_HASH))

    def test_field_by_index(self):
        values = self.registry.field(ARRAY_HASH, 1)
        self.assertEqual(values.name, "Values")
        self.assertTrue(values.array)
        self.assertEqual(values.align, 8)

    def test_missing_class_is_schema_lookup_failure(self):
        with self.assertRaises(SchemaLookupFailure):
            self.registry.lookup_class(0xDEADBEEF)
        # Still catchable as a KeyError
        with self.assertRaises(KeyError):
            self.registry.field_count(0xDEADBEEF)
        self.assertIsNone(self.registry.get_type_info(0xDEADBEEF))

    def test_missing_field_index(self):
        with self.assertRaises(SchemaLookupFailure):
            self.registry.field(SIMPLE_HASH, 3)

    def test_unknown_type_degrades_with_warning(self):
        with self.assertLogs("rszkit.utils.type_registry", level="WARNING") as cm:
            schema = self.registry.lookup_class(UNKNOWN_HASH)
        self.assertEqual(schema.fields[0].type, TypeTag.UKN_TYPE)
        self.assertEqual(schema.fields[0].type_name, "SomethingNew")
        self.assertIn("SomethingNew", cm.output[0])

    def test_type_tag_names(self):
        self.assertEqual(TypeTag.from_name("GameObjectRef"), TypeTag.GAME_OBJECT_REF)
        self.assertEqual(TypeTag.from_name("rangei"), TypeTag.RANGE_I)
        self.assertEqual(TypeTag.from_name("Float4x4"), TypeTag.FLOAT4X4)
        self.assertEqual(TypeTag.from_name("MBString"), TypeTag.MB_STRING)
        with self.assertRaises(UnrecognizedTypeTag):
            TypeTag.from_name("NotAType")

    def test_metadata_entries_ignored(self):
        self.assertNotIn("metadata", self.registry.registry)

    def test_find_type_by_name(self):
        schema, type_id = self.registry.find_type_by_name("app.Arrays")
        self.assertEqual(type_id, ARRAY_HASH)
        self.assertEqual(schema.name, "app.Arrays")
        self.assertEqual(self.registry.find_type_by_name("app.Nope"), (None, None))

    def test_duplicate_field_names_renamed(self):
        registry = TypeRegistry.from_dict({
            "1": {"name": "Dup", "fields": [
                {"name": "v", "type": "S32", "size": 4, "align": 4},
                {"name": "v", "type": "S32", "size": 4, "align": 4},
                {"name": "v", "type": "S32", "size": 4, "align": 4},
            ]},
        })
        self.assertEqual([f.name for f in registry.lookup_class(1).fields], ["v", "v_2", "v_3"])

    def test_load_plain_and_zstd_files(self):
        raw = json.dumps(SCHEMA).encode("utf-8")
        with tempfile.TemporaryDirectory() as tmp:
            plain_path = os.path.join(tmp, "rsz.json")
            with open(plain_path, "wb") as f:
                f.write(raw)
            zst_path = os.path.join(tmp, "rsz.json.zst")
            with open(zst_path, "wb") as f:
                f.write(zstd.ZstdCompressor(level=3).compress(raw))

            for path in (plain_path, zst_path):
                with self.subTest(path=os.path.basename(path)):
                    registry = TypeRegistry(path)
                    self.assertEqual(registry.lookup_class(SIMPLE_HASH).name, "app.Simple")

    def test_requires_a_source(self):
        with self.assertRaises(ValueError):
            TypeRegistry()


if __name__ == "__main__":
    unittest.main(verbosity=2)
