"""
Command line entry point: decode a file and write its tree as JSON.

    rszkit path/to/file.fchar --schema rszsf6.json.zst
"""

import argparse
import json
import logging
import os

from rszkit.console_logger import setup_console_logging
from rszkit.factory import READERS, get_reader_by_name, get_reader_for_data
from rszkit.rsz.rsz_errors import RszError
from rszkit.rsz.rsz_file import RszFile
from rszkit.rsz.rsz_json_export import json_serializer, to_json_dict
from rszkit.settings import load_settings
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)


def _parse_int(text: str) -> int:
    return int(text, 0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rszkit",
                                     description="Decode RSZ, fchar, pfb and user files to JSON")
    parser.add_argument("file", help="File to decode")
    parser.add_argument("--schema", "-s", help="Path to the RSZ type schema (.json or .json.zst)")
    parser.add_argument("--output", "-o", help="Output JSON path (default: <file>.json)")
    parser.add_argument("--format", "-f", choices=["auto"] + sorted(READERS), default="auto",
                        help="Container format (default: detect from magic)")
    parser.add_argument("--offset", type=_parse_int, default=0,
                        help="Start offset of a bare RSZ block (hex or decimal)")
    parser.add_argument("--indent", type=int, help="JSON indent")
    parser.add_argument("--relative-strings", action="store_true",
                        help="Treat userdata string offsets as block-relative")
    parser.add_argument("--settings", help="Settings file to load")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    return parser


def decode_file(data: bytes, registry: TypeRegistry, fmt: str = "auto",
                offset: int = 0, relative_strings: bool = False):
    if offset and fmt not in ("auto", "rsz"):
        raise ValueError(f"--offset only applies to bare RSZ blocks, not {fmt} files")
    if fmt == "rsz" or offset:
        reader = RszFile(registry, relative_strings, offset)
    elif fmt == "auto":
        reader = get_reader_for_data(data, registry, relative_strings)
    else:
        reader = get_reader_by_name(fmt, registry, relative_strings)
    return reader.read(data)


def write_json(decoded, output: str, indent):
    tree = to_json_dict(decoded.to_dict())
    with open(output, "w", encoding="utf-8") as f:
        json.dump(tree, f, indent=indent, default=json_serializer, allow_nan=False)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings)
    setup_console_logging(logging.DEBUG if args.verbose else settings.get("log_level", "INFO"))

    schema_path = args.schema or settings.get("rsz_json_path")
    if not schema_path or not os.path.exists(schema_path):
        logger.error("RSZ schema not found: %r (use --schema or set rsz_json_path)", schema_path)
        return 2

    output = args.output or args.file + ".json"
    indent = args.indent if args.indent is not None else settings.get("json_indent", 2)
    try:
        registry = TypeRegistry(schema_path)
        with open(args.file, "rb") as f:
            data = f.read()
        relative = args.relative_strings or bool(settings.get("relative_userdata_strings"))
        decoded = decode_file(data, registry, args.format, args.offset, relative)
        logger.info("Writing %s...", output)
        write_json(decoded, output, indent)
    except (RszError, ValueError, OSError) as e:
        logger.error("Decode failed for %s: %s", args.file, e)
        return 1

    logger.info("Complete!")
    return 0
