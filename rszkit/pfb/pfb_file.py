"""
Prefab (.pfb) reader.

Layout: 56-byte header, game object infos, game object ref infos, resource
infos and userdata infos (each table padded to 16), then the RSZ block at
header.data_offset.
"""

import logging
import struct

from rszkit.rsz.rsz_block import RszBlock, decode_block
from rszkit.rsz.rsz_errors import TruncatedInput
from rszkit.rsz.rsz_tables import GameObjectRefInfo, PfbGameObject, ResourceInfo, UserDataInfo
from rszkit.utils.hex_util import align
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

PFB_MAGIC = b"PFB\x00"


class PfbHeader:
    SIZE = 56

    def __init__(self):
        self.signature = b""
        self.info_count = 0
        self.resource_count = 0
        self.gameobject_ref_info_count = 0
        self.userdata_count = 0
        self.reserved = 0
        self.gameobject_ref_info_tbl = 0
        self.resource_info_tbl = 0
        self.userdata_info_tbl = 0
        self.data_offset = 0

    def parse(self, data: bytes):
        if len(data) < self.SIZE:
            raise TruncatedInput(self.SIZE, len(data), 0)
        (self.signature,
         self.info_count,
         self.resource_count,
         self.gameobject_ref_info_count,
         self.userdata_count,
         self.reserved,
         self.gameobject_ref_info_tbl,
         self.resource_info_tbl,
         self.userdata_info_tbl,
         self.data_offset) = struct.unpack_from("<4s5I4Q", data, 0)


class PfbFile:

    def __init__(self, registry: TypeRegistry, relative_strings: bool = False):
        self.registry = registry
        self.relative_strings = relative_strings
        self.header = PfbHeader()
        self.gameobjects = []
        self.gameobject_ref_infos = []
        self.resource_infos = []
        self.userdata_infos = []
        self.rsz: RszBlock = None

    @staticmethod
    def can_handle(data: bytes) -> bool:
        return data[:4] == PFB_MAGIC

    def read(self, data: bytes) -> "PfbFile":
        self.header.parse(data)
        offset = self.header.SIZE

        for _ in range(self.header.info_count):
            go = PfbGameObject()
            offset = go.parse(data, offset)
            self.gameobjects.append(go)

        for _ in range(self.header.gameobject_ref_info_count):
            gori = GameObjectRefInfo()
            offset = gori.parse(data, offset)
            self.gameobject_ref_infos.append(gori)
        offset = align(offset, 16)

        for _ in range(self.header.resource_count):
            ri = ResourceInfo()
            offset = ri.parse(data, offset)
            self.resource_infos.append(ri)
        offset = align(offset, 16)

        for _ in range(self.header.userdata_count):
            ui = UserDataInfo()
            offset = ui.parse(data, offset)
            self.userdata_infos.append(ui)

        logger.info("Parsing prefab RSZ block at 0x%X...", self.header.data_offset)
        self.rsz = decode_block(data, self.registry, self.header.data_offset, self.relative_strings)
        return self

    def to_dict(self) -> dict:
        return {
            "header": self.header,
            "gameobjects": self.gameobjects,
            "gameobject_ref_infos": self.gameobject_ref_infos,
            "resource_infos": self.resource_infos,
            "userdata_infos": self.userdata_infos,
            "rsz": self.rsz,
        }
