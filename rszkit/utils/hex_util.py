# Misc raw buffer operations

import uuid
from typing import Tuple


def align(offset, alignment=16):
    if alignment <= 1:
        return offset
    r = offset % alignment
    return offset if r == 0 else offset + (alignment - r)


def padding_for(offset: int, alignment: int) -> int:
    """Bytes needed to bring offset up to the next multiple of alignment."""
    if alignment <= 1:
        return 0
    return (alignment - (offset % alignment)) % alignment


def read_wstring(data: bytes, offset: int, max_wchars: int = 65535) -> Tuple[str, int]:
    """
    Reads a UTF-16LE string from data starting at offset.
    Stops at the first aligned pair of NUL bytes and returns the string
    together with the offset just past the terminator.
    """
    view = memoryview(data)
    end = offset
    while end + 1 < len(data) and not (view[end] == 0 and view[end + 1] == 0):
        end += 2
        if (end - offset) // 2 >= max_wchars:
            break

    string = view[offset:end].tobytes().decode("utf-16le", errors="replace")
    return string, end + 2


def guid_le_to_str(guid_bytes: bytes) -> str:
    """Convert little-endian GUID bytes to string format"""
    if len(guid_bytes) != 16:
        return "00000000-0000-0000-0000-000000000000"
    return str(uuid.UUID(bytes_le=bytes(guid_bytes)))


def guid_str_to_le(guid_str: str) -> bytes:
    return uuid.UUID(guid_str).bytes_le
