"""
User data (.user) reader: 48-byte header, resource infos, userdata infos,
then the RSZ block at header.data_offset.
"""

import logging
import struct

from rszkit.rsz.rsz_block import RszBlock, decode_block
from rszkit.rsz.rsz_errors import TruncatedInput
from rszkit.rsz.rsz_tables import ResourceInfo, UserDataInfo
from rszkit.utils.hex_util import align
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

USR_MAGIC = b"USR\x00"


class UsrHeader:
    SIZE = 48

    def __init__(self):
        self.signature = b""
        self.resource_count = 0
        self.userdata_count = 0
        self.info_count = 0
        self.resource_info_tbl = 0
        self.userdata_info_tbl = 0
        self.data_offset = 0
        self.reserved = 0

    def parse(self, data: bytes):
        if len(data) < self.SIZE:
            raise TruncatedInput(self.SIZE, len(data), 0)
        (self.signature,
         self.resource_count,
         self.userdata_count,
         self.info_count,
         self.resource_info_tbl,
         self.userdata_info_tbl,
         self.data_offset,
         self.reserved) = struct.unpack_from("<4s3I3QQ", data, 0)


class UsrFile:

    def __init__(self, registry: TypeRegistry, relative_strings: bool = False):
        self.registry = registry
        self.relative_strings = relative_strings
        self.header = UsrHeader()
        self.resource_infos = []
        self.userdata_infos = []
        self.rsz: RszBlock = None

    @staticmethod
    def can_handle(data: bytes) -> bool:
        return data[:4] == USR_MAGIC

    def read(self, data: bytes) -> "UsrFile":
        self.header.parse(data)
        offset = self.header.SIZE

        for _ in range(self.header.resource_count):
            ri = ResourceInfo()
            offset = ri.parse(data, offset)
            self.resource_infos.append(ri)
        offset = align(offset, 16)

        for _ in range(self.header.userdata_count):
            ui = UserDataInfo()
            offset = ui.parse(data, offset)
            self.userdata_infos.append(ui)

        logger.info("Parsing user data RSZ block at 0x%X...", self.header.data_offset)
        self.rsz = decode_block(data, self.registry, self.header.data_offset, self.relative_strings)
        return self

    def to_dict(self) -> dict:
        return {
            "header": self.header,
            "resource_infos": self.resource_infos,
            "userdata_infos": self.userdata_infos,
            "rsz": self.rsz,
        }
