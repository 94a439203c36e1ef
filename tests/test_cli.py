import io
import json
import logging
import os
import shutil
import tempfile
import unittest

from rsz_test_utils import SCHEMA, single_simple_block

from rszkit.cli import build_parser, decode_file, main
from rszkit.console_logger import ConsoleHandler, setup_console_logging
from rszkit.rsz.rsz_data_types import F32Data, FloatArrayData, Vec3Data
from rszkit.rsz.rsz_json_export import to_json_dict
from rszkit.settings import DEFAULT_SETTINGS, load_settings, save_settings
from rszkit.utils.type_registry import TypeRegistry


class CliTestCase(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.schema_path = os.path.join(self.test_dir, "schema.json")
        with open(self.schema_path, "w", encoding="utf-8") as f:
            json.dump(SCHEMA, f)
        self.rsz_path = self.write_file("block.rsz", single_simple_block(7))

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers[:]:
            if isinstance(handler, ConsoleHandler):
                root.removeHandler(handler)
        shutil.rmtree(self.test_dir)

    def write_file(self, name: str, data: bytes) -> str:
        path = os.path.join(self.test_dir, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def missing_settings(self) -> str:
        return os.path.join(self.test_dir, "no_settings.json")


class TestMain(CliTestCase):

    def test_decodes_to_json(self):
        code = main([self.rsz_path, "--schema", self.schema_path,
                     "--settings", self.missing_settings()])
        self.assertEqual(code, 0)
        with open(self.rsz_path + ".json", encoding="utf-8") as f:
            tree = json.load(f)
        instance = tree["rsz"]["instances"][0]
        self.assertEqual(instance["class"], "app.Simple")
        self.assertEqual(instance["fields"], {"Enabled": True, "Count": 7, "Name": "x"})

    def test_output_and_offset(self):
        embedded = self.write_file("embedded.bin", b"\x00" * 32 + single_simple_block(9, base=32))
        output = os.path.join(self.test_dir, "out.json")
        code = main([embedded, "-s", self.schema_path, "-o", output, "--offset", "0x20",
                     "--indent", "0", "--settings", self.missing_settings()])
        self.assertEqual(code, 0)
        with open(output, encoding="utf-8") as f:
            tree = json.load(f)
        self.assertEqual(tree["rsz"]["start_offset"], 32)
        self.assertEqual(tree["rsz"]["instances"][0]["fields"]["Count"], 9)

    def test_schema_from_settings(self):
        settings_path = os.path.join(self.test_dir, "settings.json")
        save_settings({"rsz_json_path": self.schema_path, "log_level": "WARNING"}, settings_path)
        self.assertEqual(main([self.rsz_path, "--settings", settings_path]), 0)
        self.assertTrue(os.path.exists(self.rsz_path + ".json"))

    def test_missing_schema(self):
        code = main([self.rsz_path, "--schema", os.path.join(self.test_dir, "nope.json"),
                     "--settings", self.missing_settings()])
        self.assertEqual(code, 2)

    def test_decode_failure(self):
        broken = self.write_file("broken.rsz", single_simple_block(1)[:60])
        with self.assertLogs("rszkit.cli", level="ERROR") as cm:
            code = main([broken, "--schema", self.schema_path,
                         "--settings", self.missing_settings()])
        self.assertEqual(code, 1)
        self.assertIn("Decode failed", cm.output[0])
        self.assertFalse(os.path.exists(broken + ".json"))

    def test_unsupported_format(self):
        unknown = self.write_file("unknown.bin", b"\x00" * 64)
        code = main([unknown, "--schema", self.schema_path,
                     "--settings", self.missing_settings()])
        self.assertEqual(code, 1)

    def test_offset_rejected_for_container_formats(self):
        code = main([self.rsz_path, "--schema", self.schema_path, "--format", "pfb",
                     "--offset", "16", "--settings", self.missing_settings()])
        self.assertEqual(code, 1)
        registry = TypeRegistry.from_dict(SCHEMA)
        with self.assertRaises(ValueError):
            decode_file(single_simple_block(1), registry, "user", 16)

    def test_unwritable_output(self):
        output = os.path.join(self.test_dir, "missing_dir", "out.json")
        with self.assertLogs("rszkit.cli", level="ERROR"):
            code = main([self.rsz_path, "--schema", self.schema_path, "-o", output,
                         "--settings", self.missing_settings()])
        self.assertEqual(code, 1)

    def test_parser_defaults(self):
        args = build_parser().parse_args(["file.user"])
        self.assertEqual(args.format, "auto")
        self.assertEqual(args.offset, 0)
        self.assertFalse(args.relative_strings)
        self.assertIsNone(args.indent)


class TestSettings(CliTestCase):

    def test_defaults_when_missing(self):
        self.assertEqual(load_settings(self.missing_settings()), DEFAULT_SETTINGS)

    def test_merges_defaults(self):
        path = os.path.join(self.test_dir, "settings.json")
        save_settings({"json_indent": 4}, path)
        settings = load_settings(path)
        self.assertEqual(settings["json_indent"], 4)
        self.assertEqual(settings["log_level"], "INFO")
        self.assertFalse(settings["relative_userdata_strings"])

    def test_invalid_file(self):
        path = self.write_file("bad.json", b"[1, 2")
        with self.assertLogs("rszkit.settings", level="ERROR"):
            settings = load_settings(path)
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertIsNot(settings, DEFAULT_SETTINGS)


class TestConsoleLogging(CliTestCase):

    def test_replaces_previous_handler(self):
        first = setup_console_logging("DEBUG", io.StringIO())
        stream = io.StringIO()
        second = setup_console_logging(logging.WARNING, stream)
        root = logging.getLogger()
        self.assertNotIn(first, root.handlers)
        self.assertEqual([h for h in root.handlers if isinstance(h, ConsoleHandler)], [second])
        self.assertEqual(root.level, logging.WARNING)

        logging.getLogger("rszkit.test").warning("Header parsed!")
        self.assertIn("WARNING - Header parsed!", stream.getvalue())

    def test_unknown_level_name(self):
        setup_console_logging("chatty", io.StringIO())
        self.assertEqual(logging.getLogger().level, logging.INFO)


class TestJsonExport(unittest.TestCase):

    def test_non_finite_floats_are_strings(self):
        nan, inf = float("nan"), float("inf")
        tree = to_json_dict({
            "scalar": F32Data(nan),
            "vector": Vec3Data(inf, -inf, 1.5),
            "matrix": FloatArrayData([nan, 2.0]),
            "plain": -inf,
        })
        self.assertEqual(tree, {
            "scalar": "NaN",
            "vector": {"x": "Infinity", "y": "-Infinity", "z": 1.5},
            "matrix": ["NaN", 2.0],
            "plain": "-Infinity",
        })
        self.assertIn('"NaN"', json.dumps(tree, allow_nan=False))


if __name__ == "__main__":
    unittest.main(verbosity=2)
