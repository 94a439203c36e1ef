"""
Bounds-checked little-endian cursor over a byte buffer.

Every reader in the package goes through BinaryHandler so that short reads
surface as TruncatedInput instead of struct errors or silent slicing.
"""

import struct
from contextlib import contextmanager
from typing import Any, Union

from rszkit.rsz.rsz_errors import MalformedString, TruncatedInput


class BinaryHandler:

    def __init__(self, data: Union[bytes, bytearray], offset: int = 0):
        self.data = data if isinstance(data, (bytes, bytearray)) else bytes(data)
        self.position = 0
        self.offset = offset

    def __len__(self):
        return len(self.data)

    @property
    def tell(self) -> int:
        """Get current absolute position in the buffer."""
        return self.offset + self.position

    def seek(self, pos: int):
        """Seek to absolute position."""
        if pos < 0:
            raise ValueError(f"Cannot seek to negative position: {pos}")
        self.position = pos - self.offset

    @contextmanager
    def seek_temp(self, pos: int):
        """Context manager for temporary seek operations."""
        saved = self.position
        try:
            self.seek(pos)
            yield
        finally:
            self.position = saved

    def skip(self, count: int):
        self.position += count

    def align(self, alignment: int):
        if alignment <= 1:
            return
        padding = (alignment - (self.tell % alignment)) % alignment
        if padding > 0:
            self.skip(padding)

    def read(self, fmt: str) -> Any:
        size = struct.calcsize(fmt)
        data = self.read_bytes(size)
        result = struct.unpack_from(fmt, data, 0)
        return result[0] if len(result) == 1 else result

    def read_bytes(self, count: int) -> bytes:
        start = self.tell
        available = len(self.data) - start
        if count < 0 or start < 0 or available < count:
            raise TruncatedInput(count, max(available, 0), start)
        self.position += count
        return bytes(self.data[start:start + count])

    def read_uint8(self) -> int:
        return self.read('<B')

    def read_int8(self) -> int:
        return self.read('<b')

    def read_uint16(self) -> int:
        return self.read('<H')

    def read_int16(self) -> int:
        return self.read('<h')

    def read_int32(self) -> int:
        return self.read('<i')

    def read_uint32(self) -> int:
        return self.read('<I')

    def read_int64(self) -> int:
        return self.read('<q')

    def read_uint64(self) -> int:
        return self.read('<Q')

    def read_float(self) -> float:
        return self.read('<f')

    def read_double(self) -> float:
        return self.read('<d')

    def read_counted_wstring(self) -> str:
        """u32 character count followed by that many UTF-16LE code units."""
        count = self.read_uint32()
        position = self.tell
        raw = self.read_bytes(count * 2)
        try:
            text = raw.decode('utf-16le')
        except UnicodeDecodeError:
            raise MalformedString(raw, 'utf-16le', position) from None
        return text.replace('\x00', '')

    def read_counted_string(self) -> str:
        """u32 byte count followed by that many UTF-8 bytes."""
        count = self.read_uint32()
        position = self.tell
        raw = self.read_bytes(count)
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError:
            raise MalformedString(raw, 'utf-8', position) from None
        return text.rstrip('\x00')
