"""
RSZ block decoding and encoding.

Block layout (v4+):
    header (48 bytes)
    object table        object_count x i32
    instance infos      instance_count x {hash u32, crc u32}
    <align 16>
    userdata infos      userdata_count x {instance_id u32, type_id u32, string_offset u64}
    userdata strings    UTF-16LE, NUL-NUL terminated
    <align 16>
    instance data       instances 1..N in order, userdata instances excluded

v3 headers are 32 bytes, carry no userdata table and pad every instance
info with 8 extra bytes.
"""

import logging
import struct
from dataclasses import dataclass, field, replace
from typing import Dict, List

from rszkit.rsz.rsz_instance import RszInstance, decode_instance, encode_instance
from rszkit.utils.binary_handler import BinaryHandler
from rszkit.utils.hex_util import padding_for, read_wstring
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

RSZ_MAGIC = 0x005A5352  # b"RSZ\0"


@dataclass
class RszHeader:
    magic: int = RSZ_MAGIC
    version: int = 16
    object_count: int = 0
    instance_count: int = 0
    userdata_count: int = 0
    reserved: int = 0
    instance_offset: int = 0
    data_offset: int = 0
    userdata_offset: int = 0

    @property
    def SIZE(self):
        return 32 if self.version < 4 else 48

    def parse(self, handler: BinaryHandler):
        self.magic = handler.read_uint32()
        self.version = handler.read_uint32()
        if self.version < 4:
            self.object_count = handler.read_uint32()
            self.instance_count = handler.read_uint32()
            self.userdata_count = 0
            self.reserved = 0
            self.instance_offset = handler.read_uint64()
            self.data_offset = handler.read_uint64()
            self.userdata_offset = 0
        else:
            (self.object_count, self.instance_count, self.userdata_count,
             self.reserved) = handler.read("<4I")
            self.instance_offset, self.data_offset, self.userdata_offset = handler.read("<3Q")
        return self

    def pack(self) -> bytes:
        if self.version < 4:
            return struct.pack("<4I2Q", self.magic, self.version, self.object_count,
                               self.instance_count, self.instance_offset, self.data_offset)
        return struct.pack("<5I I Q Q Q", self.magic, self.version, self.object_count,
                           self.instance_count, self.userdata_count, self.reserved,
                           self.instance_offset, self.data_offset, self.userdata_offset)


@dataclass
class RszInstanceInfo:
    hash: int = 0
    crc: int = 0


@dataclass
class RszUserDataInfo:
    instance_id: int = 0
    type_id: int = 0
    string_offset: int = 0
    string: str = ""


@dataclass
class RszBlock:
    start_offset: int = 0
    header: RszHeader = field(default_factory=RszHeader)
    object_table: List[int] = field(default_factory=list)
    instance_infos: List[RszInstanceInfo] = field(default_factory=list)
    userdata_infos: List[RszUserDataInfo] = field(default_factory=list)
    instances: List[RszInstance] = field(default_factory=list)

    @property
    def userdata_by_id(self) -> Dict[int, RszUserDataInfo]:
        return {info.instance_id: info for info in self.userdata_infos}

    @property
    def instance_by_index(self) -> Dict[int, RszInstance]:
        return {inst.index: inst for inst in self.instances}

    @property
    def root_instances(self) -> List[RszInstance]:
        by_index = self.instance_by_index
        return [by_index[i] for i in self.object_table if i in by_index]


def decode_block(buffer, registry: TypeRegistry, start_offset: int = 0,
                 relative_strings: bool = False) -> RszBlock:
    """
    Decode the RSZ block that starts at start_offset within buffer.

    Userdata string offsets are absolute unless relative_strings is set, in
    which case they are taken relative to start_offset.
    """
    handler = BinaryHandler(buffer)
    handler.seek(start_offset)

    block = RszBlock(start_offset=start_offset)
    block.header = RszHeader().parse(handler)
    header = block.header

    block.object_table = [handler.read_int32() for _ in range(header.object_count)]

    for _ in range(header.instance_count):
        type_hash, crc = handler.read("<II")
        if header.version < 4:
            handler.skip(8)
        block.instance_infos.append(RszInstanceInfo(type_hash, crc))

    handler.align(16)

    string_base = start_offset if relative_strings else 0
    for _ in range(header.userdata_count):
        instance_id, type_id, string_offset = handler.read("<IIQ")
        string_pos = string_base + string_offset
        if string_pos >= len(buffer):
            # Report the bad offset as a short read
            with handler.seek_temp(string_pos):
                handler.read_bytes(2)
        string, _ = read_wstring(buffer, string_pos)
        block.userdata_infos.append(RszUserDataInfo(instance_id, type_id, string_offset, string))

    userdata_ids = {info.instance_id for info in block.userdata_infos}
    userdata_by_id = block.userdata_by_id

    handler.seek(start_offset + header.data_offset)
    for index in range(1, header.instance_count):
        if index in userdata_ids:
            continue
        info = block.instance_infos[index]
        block.instances.append(
            decode_instance(handler, registry, info.hash, index, userdata_by_id)
        )

    logger.debug("Decoded RSZ block at 0x%X: %d instances, %d userdata",
                 start_offset, len(block.instances), len(block.userdata_infos))
    return block


def encode_instances(block: RszBlock, base: int = 0) -> bytes:
    """Re-serialize just the instance data stream, as if it started at base."""
    out = bytearray()
    for instance in sorted(block.instances, key=lambda inst: inst.index):
        encode_instance(out, instance, base)
    return bytes(out)


def encode_block(block: RszBlock, start_offset: int = 0, relative_strings: bool = False) -> bytes:
    """
    Write a complete block as it would sit at start_offset in a file.

    Header offsets and counts are recomputed on a copy of the header; the
    block itself is left untouched. Userdata string offsets follow the same
    absolute or relative convention that decode_block is told to use.
    """
    is_v3 = block.header.version < 4
    header = replace(
        block.header,
        object_count=len(block.object_table),
        instance_count=len(block.instance_infos),
        userdata_count=0 if is_v3 else len(block.userdata_infos),
    )

    out = bytearray(header.pack())
    for obj_id in block.object_table:
        out += struct.pack("<i", obj_id)

    header.instance_offset = len(out)
    for info in block.instance_infos:
        out += struct.pack("<II", info.hash, info.crc)
        if is_v3:
            out += b"\x00" * 8

    out += b"\x00" * padding_for(start_offset + len(out), 16)
    header.userdata_offset = 0 if is_v3 else len(out)

    if not is_v3:
        entry_positions = []
        for info in block.userdata_infos:
            entry_positions.append(len(out))
            out += struct.pack("<IIQ", info.instance_id, info.type_id, 0)

        string_base = start_offset if relative_strings else 0
        for entry_pos, info in zip(entry_positions, block.userdata_infos):
            string_offset = start_offset + len(out) - string_base
            out += info.string.encode("utf-16le") + b"\x00\x00"
            struct.pack_into("<Q", out, entry_pos + 8, string_offset)

        out += b"\x00" * padding_for(start_offset + len(out), 16)

    header.data_offset = len(out)
    out += encode_instances(block, start_offset + len(out))

    out[0:header.SIZE] = header.pack()
    return bytes(out)
