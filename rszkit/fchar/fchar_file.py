"""
Character asset (.fchar) reader.

An fchar file is a table of contents pointing at many RSZ blocks: one per
style, one per action list plus one per object in each action list, one per
data list and a final "personal data" block.
"""

import logging

from rszkit.fchar.fchar_data_types import (
    ActionData, ActionList, ActionListInfo, ActionListTable, DataId,
    DataListInfo, DataListItem, FcharHeader, FcharObject, KeyData,
    ObjectData, ObjectInfo, StyleData,
)
from rszkit.rsz.rsz_block import RszBlock, decode_block
from rszkit.utils.binary_handler import BinaryHandler
from rszkit.utils.type_registry import TypeRegistry

logger = logging.getLogger(__name__)

FCHAR_MAGIC = b"CHAR"


class FcharFile:

    def __init__(self, registry: TypeRegistry, relative_strings: bool = False):
        self.registry = registry
        self.relative_strings = relative_strings
        self.header = FcharHeader()
        self.id_table = []
        self.parent_id_table = []
        self.action_list_table = ActionListTable()
        self.default_style_data: RszBlock = None
        self.style_data = []
        self.action_list = []
        self.data_id_table = []
        self.data_list_table = []
        self.personal_data: RszBlock = None
        self._handler: BinaryHandler = None
        self._data = b""

    @staticmethod
    def can_handle(data: bytes) -> bool:
        return data[4:8] == FCHAR_MAGIC

    def _rsz(self, offset: int) -> RszBlock:
        return decode_block(self._data, self.registry, offset, self.relative_strings)

    def read(self, data: bytes) -> "FcharFile":
        self._data = data
        self._handler = handler = BinaryHandler(data)
        logger.info("Parsing fchar file...")

        self.header = FcharHeader(*handler.read(FcharHeader.FMT))
        style_count = self.header.style_count
        self.id_table = [handler.read_int32() for _ in range(style_count)]
        self.parent_id_table = [handler.read_int32() for _ in range(style_count)]
        handler.align(16)
        self.action_list_table = self._read_action_list_table(handler.tell, style_count)
        logger.info("Header parsed!")

        logger.info("Parsing style data...")
        self.default_style_data = self._rsz(self.action_list_table.action_rsz)
        self.style_data = [self._read_style_data(offset)
                           for offset in self.action_list_table.style_data_offsets]
        logger.info("Style data parsed!")

        logger.info("Parsing action list...")
        pointer = self.action_list_table.action_list_table_offset + 32
        self.action_list = []
        for _ in range(self.action_list_table.action_list_count):
            self.action_list.append(self._read_action_list(pointer))
            pointer += 8
        logger.info("Action list parsed!")

        logger.info("Parsing data tables...")
        with handler.seek_temp(self.header.data_id_table_offset):
            self.data_id_table = [DataId.coerce(handler.read_uint32())
                                  for _ in range(self.header.data_count)]
        self.data_list_table = [
            self._read_data_list_item(self.header.data_list_table_offset + 8 * n)
            for n in range(self.header.data_count)
        ]
        logger.info("Data tables parsed!")

        logger.info("Parsing personal data...")
        self.personal_data = self._rsz(self.header.object_table_rsz_offset)
        logger.info("Fchar file parsed!")
        return self

    def _read_action_list_table(self, offset: int, style_count: int) -> ActionListTable:
        handler = self._handler
        table = ActionListTable()
        with handler.seek_temp(offset):
            table.action_list_table_offset = handler.read_uint64()
            table.style_data_offsets = [handler.read_uint64() for _ in range(max(style_count - 1, 0))]
        with handler.seek_temp(table.action_list_table_offset):
            (table.action_list_offset,
             table.action_rsz,
             table.data_id_table_offset) = handler.read("<3Q")
            table.action_list_count, table.object_count = handler.read("<2I")
        return table

    def _read_style_data(self, offset: int) -> StyleData:
        with self._handler.seek_temp(offset):
            start, rsz_offset, end = self._handler.read("<3Q")
        return StyleData(start, rsz_offset, end, self._rsz(rsz_offset))

    def _read_action_list(self, pointer: int) -> ActionList:
        handler = self._handler
        with handler.seek_temp(pointer):
            action_offset = handler.read_uint64()
        with handler.seek_temp(action_offset):
            data_start, rsz_offset, rsz_end = handler.read("<3Q")
            action_count, object_count = handler.read("<2I")
            action_data = ActionData(*handler.read("<4i"))

        info = ActionListInfo(action_offset, data_start, rsz_offset, rsz_end,
                              action_count, object_count, action_data)
        action_list = ActionList(info, self._rsz(rsz_offset))
        for n in range(object_count):
            action_list.objects.append(self._read_object(data_start + 8 * n))
        return action_list

    def _read_object(self, pointer: int) -> FcharObject:
        handler = self._handler
        with handler.seek_temp(pointer):
            object_offset = handler.read_uint64()
        with handler.seek_temp(object_offset):
            data_start, rsz_offset, rsz_end = handler.read("<3Q")
            data_count, reserved = handler.read("<2i")
            key_data = [KeyData(*handler.read("<2i")) for _ in range(max(data_count, 0))]

        info = ObjectInfo(object_offset, data_start, rsz_offset, rsz_end,
                          ObjectData(data_count, reserved, key_data))
        return FcharObject(info, self._rsz(rsz_offset))

    def _read_data_list_item(self, pointer: int) -> DataListItem:
        handler = self._handler
        with handler.seek_temp(pointer):
            data_list_offset = handler.read_uint64()
        with handler.seek_temp(data_list_offset):
            info = DataListInfo(*handler.read("<3QI"))
            data_ids = [handler.read_uint32() for _ in range(info.data_count)]
        return DataListItem(data_list_offset, info, data_ids, self._rsz(info.rsz_offset))

    def to_dict(self) -> dict:
        return {
            "header": self.header,
            "default_style_data": self.default_style_data,
            "style_data": self.style_data,
            "action_list": self.action_list,
            "data_id_table": self.data_id_table,
            "data_list_table": self.data_list_table,
            "personal_data": self.personal_data,
        }
