import json
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import zstandard as zstd

from rszkit.rsz.rsz_data_types import TypeTag
from rszkit.rsz.rsz_errors import SchemaLookupFailure, UnrecognizedTypeTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSchema:
    name: str
    type: TypeTag
    size: int
    align: int
    array: bool
    original_type: str = ""
    type_name: str = ""


@dataclass(frozen=True)
class ClassSchema:
    hash: int
    name: str
    fields: Tuple[FieldSchema, ...]


def load_registry_json(json_path: str) -> dict:
    """Read a schema dump, transparently decompressing .zst files."""
    if json_path.endswith(".zst"):
        with open(json_path, "rb") as f:
            dctx = zstd.ZstdDecompressor()
            with dctx.stream_reader(f) as reader:
                raw = reader.read()
        return json.loads(raw.decode("utf-8"))

    with open(json_path, "r", encoding="utf-8") as f:
        return json.load(f)


def dedupe_field_names(fields):
    """Rename repeated field names to name_2, name_3, ... in place."""
    seen_names = {}
    for field in fields:
        name = field.get("name")
        if not name:
            continue
        if name in seen_names:
            count = seen_names[name] + 1
            seen_names[name] = count
            new_name = f"{name}_{count}"
            while new_name in seen_names:
                count += 1
                new_name = f"{name}_{count}"
            seen_names[new_name] = 1
            field["name"] = new_name
        else:
            seen_names[name] = 1


class TypeRegistry:
    """
    Read-only class schema lookup keyed by 32-bit class hash.

    Built once from a schema dump and handed to every decoder call. Keys in
    the dump are lowercase hex, either unpadded or zero-padded to 8 digits.
    """

    def __init__(self, json_path: str = None, registry: dict = None):
        self.json_path = json_path
        if registry is None:
            if json_path is None:
                raise ValueError("TypeRegistry needs a json_path or a registry dict")
            registry = load_registry_json(json_path)

        self.registry = {}
        for type_key, type_info in registry.items():
            if not isinstance(type_info, dict) or "fields" not in type_info:
                continue
            type_info = dict(type_info)
            type_info["fields"] = [dict(f) for f in type_info.get("fields", [])]
            dedupe_field_names(type_info["fields"])
            self.registry[type_key.lower()] = type_info

        self._lock = threading.Lock()
        self._class_cache: Dict[int, Optional[ClassSchema]] = {}
        self._warned_tags = set()
        logger.debug("Loaded %d class schemas", len(self.registry))

    @classmethod
    def from_dict(cls, registry: dict) -> "TypeRegistry":
        return cls(registry=registry)

    def _lookup_type_info(self, type_id: int):
        hex_key = format(type_id, "x")
        info = self.registry.get(hex_key)
        if info is None and len(hex_key) < 8:
            info = self.registry.get(hex_key.zfill(8))
        return info

    def get_type_info(self, type_id: int) -> Optional[dict]:
        """
        Raw schema dict for a class hash, or None if the hash is unknown.
        """
        with self._lock:
            return self._lookup_type_info(type_id)

    def _build_field(self, class_name: str, field: dict) -> FieldSchema:
        type_name = field.get("type", "")
        try:
            tag = TypeTag.from_name(type_name)
        except UnrecognizedTypeTag as e:
            if type_name not in self._warned_tags:
                self._warned_tags.add(type_name)
                logger.warning("%s (class %s); decoding as raw bytes", e, class_name)
            tag = TypeTag.UKN_TYPE

        return FieldSchema(
            name=field.get("name", ""),
            type=tag,
            size=int(field.get("size", 0)),
            align=max(int(field.get("align", 1)), 1),
            array=bool(field.get("array", False)),
            original_type=field.get("original_type", ""),
            type_name=type_name,
        )

    def lookup_class(self, class_hash: int) -> ClassSchema:
        with self._lock:
            cached = self._class_cache.get(class_hash)
            if cached is not None:
                return cached

            info = self._lookup_type_info(class_hash)
            if info is None:
                raise SchemaLookupFailure(f"No schema for class hash 0x{class_hash:08X}")

            name = info.get("name", "")
            schema = ClassSchema(
                hash=class_hash,
                name=name,
                fields=tuple(self._build_field(name, f) for f in info.get("fields", [])),
            )
            self._class_cache[class_hash] = schema
            return schema

    def field_count(self, class_hash: int) -> int:
        return len(self.lookup_class(class_hash).fields)

    def field(self, class_hash: int, index: int) -> FieldSchema:
        fields = self.lookup_class(class_hash).fields
        if not 0 <= index < len(fields):
            raise SchemaLookupFailure(
                f"Class 0x{class_hash:08X} has {len(fields)} fields, no field {index}"
            )
        return fields[index]

    def find_type_by_name(self, type_name: str) -> tuple:
        """
        Look up a class schema and hash by class name.
        Returns a tuple of (ClassSchema, hash) or (None, None) if not found.
        """
        with self._lock:
            items = list(self.registry.items())
        for type_key, info in items:
            if info.get("name") == type_name:
                type_id = int(type_key, 16)
                return self.lookup_class(type_id), type_id
        return None, None
