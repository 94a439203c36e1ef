"""
Field value decoding and encoding.

decode_value reads one value at the handler's cursor: it skips alignment
padding measured from the absolute buffer position, parses the value with
the class for its type tag and then moves the cursor to the end of the
declared field size. Strings are the exception; their length comes from the
stream.

encode_value is the inverse and appends to a bytearray, padding against
base + len(out) so the output lines up with where it will sit in a file.
"""

import logging
import struct
from typing import Dict, Optional

from rszkit.rsz.rsz_data_types import (
    ArrayData, FloatArrayData, GuidData, RawBytesData, RuntimeTypeData,
    StringData, TypeTag, UserDataData, VARIABLE_LENGTH_TYPES, get_type_class,
)
from rszkit.rsz.rsz_errors import MalformedString
from rszkit.utils.binary_handler import BinaryHandler
from rszkit.utils.hex_util import guid_str_to_le, padding_for

logger = logging.getLogger(__name__)


class FieldReadContext:
    """Cursor plus per-field metadata handed to value classes while parsing."""

    def __init__(self, handler: BinaryHandler, field_size: int = 0,
                 original_type: str = "", userdata_by_id: Optional[Dict[int, object]] = None):
        self.handler = handler
        self.field_size = field_size
        self.original_type = original_type
        self.userdata_by_id = userdata_by_id if userdata_by_id is not None else {}

    def read_struct(self, fmt: str):
        return self.handler.read(fmt)

    def read_bytes(self, count: int) -> bytes:
        return self.handler.read_bytes(count)

    def read_string_utf16(self) -> str:
        start = self.handler.tell
        try:
            return self.handler.read_counted_wstring()
        except MalformedString as e:
            logger.warning("%s; decoding with replacement characters", e)
            self.handler.seek(start)
            count = self.handler.read_uint32()
            raw = self.handler.read_bytes(count * 2)
            return raw.decode("utf-16le", errors="replace").replace("\x00", "")

    def read_string_utf8(self) -> str:
        start = self.handler.tell
        try:
            return self.handler.read_counted_string()
        except MalformedString as e:
            logger.warning("%s; decoding with replacement characters", e)
            self.handler.seek(start)
            count = self.handler.read_uint32()
            return self.handler.read_bytes(count).decode("utf-8", errors="replace").rstrip("\x00")


def _natural_width(value_class: type) -> int:
    fmt = getattr(value_class, "FMT", None)
    if isinstance(fmt, str):
        return struct.calcsize(fmt)
    if issubclass(value_class, GuidData):
        return 16
    if issubclass(value_class, UserDataData):
        return 4
    return 0


def decode_value(handler: BinaryHandler, type_tag: TypeTag, declared_size: int,
                 alignment: int, userdata_by_id=None, orig_type: str = ""):
    """
    Decode one value at handler.tell and leave the cursor just past it.

    Non-string values always consume declared_size bytes from the start of
    their payload, whatever width the value class actually reads. A declared
    size of 0 means "use the natural width". When the declared size is
    narrower than the value class, only the declared bytes are read and the
    value is parsed from them zero-extended.
    """
    handler.align(alignment)
    start = handler.tell
    value_class = get_type_class(type_tag)

    natural = _natural_width(value_class)
    if 0 < declared_size < natural:
        raw = handler.read_bytes(declared_size)
        narrow = BinaryHandler(raw + b"\x00" * (natural - declared_size))
        return value_class.parse(FieldReadContext(narrow, declared_size, orig_type, userdata_by_id))

    ctx = FieldReadContext(handler, declared_size, orig_type, userdata_by_id)
    value = value_class.parse(ctx)

    if not issubclass(value_class, VARIABLE_LENGTH_TYPES) and declared_size > 0:
        end = start + declared_size
        if end > len(handler.data):
            # Reuse the bounds check so short buffers fail the same way
            handler.seek(start)
            handler.read_bytes(declared_size)
        handler.seek(end)
    return value


def decode_value_at(buffer, cursor: int, type_tag: TypeTag, declared_size: int,
                    alignment: int, userdata_by_id=None):
    """Functional form: returns (value, new_cursor)."""
    handler = BinaryHandler(buffer)
    handler.seek(cursor)
    value = decode_value(handler, type_tag, declared_size, alignment, userdata_by_id)
    return value, handler.tell


def decode_array(handler: BinaryHandler, type_tag: TypeTag, declared_size: int,
                 alignment: int, userdata_by_id=None, orig_type: str = "") -> ArrayData:
    handler.align(4)
    count = handler.read_uint32()
    array = ArrayData([], get_type_class(type_tag), orig_type)
    for _ in range(count):
        array.add_element(
            decode_value(handler, type_tag, declared_size, alignment, userdata_by_id, orig_type)
        )
    return array


def _pad_to(out: bytearray, alignment: int, base: int):
    out.extend(b"\x00" * padding_for(base + len(out), alignment))


def _write_counted_string(out: bytearray, text: str, encoding: str, base: int):
    _pad_to(out, 4, base)
    if not text:
        out.extend(struct.pack("<I", 0))
        return
    if encoding == "utf-16le":
        payload = text.encode("utf-16le") + b"\x00\x00"
        count = len(payload) // 2
    else:
        payload = text.encode("utf-8") + b"\x00"
        count = len(payload)
    out.extend(struct.pack("<I", count))
    out.extend(payload)


def encode_value(out: bytearray, value, declared_size: int, alignment: int, base: int = 0):
    """
    Append one value to out, preceded by its alignment padding.

    Fixed-width values are written at their natural width and then padded
    with zeros up to declared_size.
    """
    _pad_to(out, alignment, base)
    start = len(out)

    if isinstance(value, RuntimeTypeData):
        _write_counted_string(out, value.value, "utf-8", base)
        return
    if isinstance(value, StringData):
        _write_counted_string(out, value.value, "utf-16le", base)
        return

    if isinstance(value, GuidData):
        raw = value.raw_bytes if value.raw_bytes else guid_str_to_le(value.guid_str)
        out.extend(raw[:16])
    elif isinstance(value, RawBytesData):
        out.extend(value.raw_bytes[:declared_size] if declared_size else value.raw_bytes)
    elif isinstance(value, UserDataData):
        out.extend(struct.pack("<I", value.value & 0xFFFFFFFF))
    elif isinstance(value, FloatArrayData):
        out.extend(struct.pack(value.FMT, *value.raw_components()))
    elif hasattr(value, "FMT"):
        out.extend(struct.pack(value.FMT, *value.raw_components()))
    else:
        raise TypeError(f"Cannot encode value of type {type(value).__name__}")

    written = len(out) - start
    if declared_size > written:
        out.extend(b"\x00" * (declared_size - written))
    elif 0 < declared_size < written:
        # Declared size wins, mirroring decode_value
        del out[start + declared_size:]


def encode_array(out: bytearray, array: ArrayData, declared_size: int, alignment: int, base: int = 0):
    _pad_to(out, 4, base)
    out.extend(struct.pack("<I", len(array.values)))
    for element in array.values:
        encode_value(out, element, declared_size, alignment, base)
