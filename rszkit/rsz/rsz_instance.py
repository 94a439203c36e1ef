"""
Decoding and encoding of single RSZ instances.

An instance is a flat, schema-ordered list of fields. Fields of type Object
or UserData hold plain integer indices into the owning block, never
references to other RszInstance objects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rszkit.rsz.rsz_data_types import ArrayData, TypeTag
from rszkit.rsz.rsz_field_codec import decode_array, decode_value, encode_array, encode_value
from rszkit.utils.binary_handler import BinaryHandler
from rszkit.utils.type_registry import TypeRegistry


@dataclass
class RszField:
    name: str
    type: TypeTag
    value: Any
    align: int = 1
    size: int = 0
    is_array: bool = False
    type_name: str = ""


@dataclass
class RszInstance:
    index: int = 0
    hash: int = 0
    class_name: str = ""
    fields: List[RszField] = field(default_factory=list)
    start_offset: int = 0
    end_offset: int = 0

    def get_field(self, name: str) -> Optional[RszField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __getitem__(self, name: str):
        f = self.get_field(name)
        if f is None:
            raise KeyError(name)
        return f.value


def decode_instance(handler: BinaryHandler, registry: TypeRegistry, class_hash: int,
                    index: int = 0, userdata_by_id: Optional[Dict[int, object]] = None) -> RszInstance:
    """
    Decode one instance of class_hash at handler.tell.

    Every schema field yields exactly one RszField; arrays are a u32 count
    aligned to 4 followed by that many elements.
    """
    schema = registry.lookup_class(class_hash)
    instance = RszInstance(index=index, hash=class_hash, class_name=schema.name,
                           start_offset=handler.tell)

    for field_def in schema.fields:
        if field_def.array:
            value = decode_array(handler, field_def.type, field_def.size, field_def.align,
                                 userdata_by_id, field_def.original_type)
        else:
            value = decode_value(handler, field_def.type, field_def.size, field_def.align,
                                 userdata_by_id, field_def.original_type)

        instance.fields.append(RszField(
            name=field_def.name,
            type=field_def.type,
            value=value,
            align=field_def.align,
            size=field_def.size,
            is_array=field_def.array,
            type_name=field_def.type_name,
        ))

    instance.end_offset = handler.tell
    return instance


def encode_instance(out: bytearray, instance: RszInstance, base: int = 0):
    """Append an instance's fields in order; padding is relative to base + len(out)."""
    for f in instance.fields:
        if f.is_array:
            array = f.value if isinstance(f.value, ArrayData) else ArrayData(list(f.value or []))
            encode_array(out, array, f.size, f.align, base)
        else:
            encode_value(out, f.value, f.size, f.align, base)
