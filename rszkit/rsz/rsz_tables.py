"""
Fixed-layout records shared by the containers that wrap an RSZ block.
"""

import struct

from rszkit.rsz.rsz_errors import TruncatedInput
from rszkit.utils.hex_util import read_wstring


def _check(data: bytes, offset: int, size: int):
    if offset < 0 or offset + size > len(data):
        raise TruncatedInput(size, max(len(data) - offset, 0), offset)


def resolve_wstring(data: bytes, offset: int) -> str:
    if offset == 0:
        return ""
    _check(data, offset, 2)
    return read_wstring(data, offset)[0]


class GameObjectRefInfo:
    SIZE = 16

    def __init__(self):
        self.object_id = 0
        self.property_id = 0
        self.array_index = 0
        self.target_id = 0

    def parse(self, data: bytes, offset: int) -> int:
        _check(data, offset, self.SIZE)
        self.object_id, self.property_id, self.array_index, self.target_id = struct.unpack_from("<4i", data, offset)
        return offset + self.SIZE


class PfbGameObject:
    SIZE = 12

    def __init__(self):
        self.id = 0
        self.parent_id = 0
        self.component_count = 0

    def parse(self, data: bytes, offset: int) -> int:
        _check(data, offset, self.SIZE)
        self.id, self.parent_id, self.component_count = struct.unpack_from("<iii", data, offset)
        return offset + self.SIZE


class ResourceInfo:
    SIZE = 8

    def __init__(self):
        self.string_offset = 0
        self.reserved = 0
        self.string = ""

    def parse(self, data: bytes, offset: int) -> int:
        _check(data, offset, self.SIZE)
        self.string_offset, self.reserved = struct.unpack_from("<II", data, offset)
        self.string = resolve_wstring(data, self.string_offset)
        return offset + self.SIZE


class UserDataInfo:
    """File-level userdata reference: class hash, crc and path string."""
    SIZE = 16

    def __init__(self):
        self.hash = 0
        self.crc = 0
        self.string_offset = 0
        self.string = ""

    def parse(self, data: bytes, offset: int) -> int:
        _check(data, offset, self.SIZE)
        self.hash, self.crc, self.string_offset = struct.unpack_from("<IIQ", data, offset)
        self.string = resolve_wstring(data, self.string_offset)
        return offset + self.SIZE
