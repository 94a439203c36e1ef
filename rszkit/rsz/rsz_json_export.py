"""
Conversion of decoded blocks and containers into JSON-ready structures.

Byte blobs become lists of byte values, enums their integer value and
non-finite floats the strings "NaN", "Infinity" or "-Infinity", so the
output is strict JSON with no custom decoding required.
"""

import dataclasses
import math
from enum import Enum

from rszkit.rsz.rsz_block import RszBlock
from rszkit.rsz.rsz_data_types import (
    ArrayData, FloatArrayData, GuidData, RawBytesData, StringData, UserDataData,
    ScalarData, VectorData,
)
from rszkit.rsz.rsz_instance import RszInstance


def json_float(value):
    """Strict JSON has no NaN or infinities; those are written as strings."""
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    return value


def value_to_json(value):
    if isinstance(value, ArrayData):
        return [value_to_json(v) for v in value.values]
    if isinstance(value, ScalarData):
        return json_float(value.value)
    if isinstance(value, VectorData):
        return {axis: json_float(v) for axis, v in zip(value.AXES, value.components())}
    if isinstance(value, StringData):
        return value.value
    if isinstance(value, GuidData):
        return value.guid_str
    if isinstance(value, UserDataData):
        return {"instance_id": value.value, "type_id": value.type_id, "string": value.string}
    if isinstance(value, FloatArrayData):
        return [json_float(v) for v in value.values]
    if isinstance(value, RawBytesData):
        return list(value.raw_bytes)
    return json_serializer(value)


def instance_to_json(instance: RszInstance) -> dict:
    return {
        "index": instance.index,
        "hash": instance.hash,
        "class": instance.class_name,
        "fields": {f.name: value_to_json(f.value) for f in instance.fields},
    }


def block_to_json(block: RszBlock) -> dict:
    return {
        "start_offset": block.start_offset,
        "header": dataclasses.asdict(block.header),
        "object_table": list(block.object_table),
        "instance_infos": [dataclasses.asdict(i) for i in block.instance_infos],
        "userdata_infos": [dataclasses.asdict(u) for u in block.userdata_infos],
        "instances": [instance_to_json(i) for i in block.instances],
    }


def to_json_dict(obj):
    """Recursively convert a decoded tree (blocks, containers, values) to JSON types."""
    if isinstance(obj, RszBlock):
        return block_to_json(obj)
    if isinstance(obj, RszInstance):
        return instance_to_json(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (bytes, bytearray)):
        return list(obj)
    if isinstance(obj, float):
        return json_float(obj)
    if isinstance(obj, (str, int, bool)) or obj is None:
        return obj
    if isinstance(obj, dict):
        return {str(k): to_json_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_dict(v) for v in obj]
    if isinstance(obj, (ArrayData, ScalarData, VectorData, StringData, GuidData,
                        UserDataData, FloatArrayData, RawBytesData)):
        return value_to_json(obj)
    if dataclasses.is_dataclass(obj):
        return {f.name: to_json_dict(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if hasattr(obj, "__dict__"):
        return {k: to_json_dict(v) for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def json_serializer(obj):
    """default= hook for json.dump"""
    if isinstance(obj, (bytes, bytearray)):
        return list(obj)
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, '__dict__') or dataclasses.is_dataclass(obj):
        return to_json_dict(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
