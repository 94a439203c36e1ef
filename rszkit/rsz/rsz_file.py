import logging

from rszkit.rsz.rsz_block import RszBlock, decode_block
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

RSZ_MAGIC_BYTES = b"RSZ\x00"


class RszFile:
    """A bare RSZ block, optionally embedded at a known offset."""

    def __init__(self, registry: TypeRegistry, relative_strings: bool = False, offset: int = 0):
        self.registry = registry
        self.relative_strings = relative_strings
        self.offset = offset
        self.rsz: RszBlock = None

    @staticmethod
    def can_handle(data: bytes) -> bool:
        return data[:4] == RSZ_MAGIC_BYTES

    def read(self, data: bytes) -> "RszFile":
        if data[self.offset:self.offset + 4] != RSZ_MAGIC_BYTES:
            logger.warning("No RSZ magic at 0x%X, decoding anyway", self.offset)
        self.rsz = decode_block(data, self.registry, self.offset, self.relative_strings)
        return self

    def to_dict(self) -> dict:
        return {"rsz": self.rsz}
