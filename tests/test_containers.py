import struct
import unittest

from rsz_test_utils import SCHEMA, SIMPLE_HASH, pad16, single_simple_block

from rszkit.factory import get_reader_by_name, get_reader_for_data
from rszkit.fchar import DataId, FcharFile
from rszkit.pfb import PfbFile
from rszkit.rsz.rsz_errors import TruncatedInput
from rszkit.rsz.rsz_file import RszFile
from rszkit.usr import UsrFile
from rszkit.utils.type_registry import TypeRegistry

BLOCK_SIZE = len(single_simple_block(0))


def wstr(text: str) -> bytes:
    return text.encode("utf-16le") + b"\x00\x00"


def build_pfb() -> bytes:
    out = bytearray(56)
    out += struct.pack("<iii", 0, -1, 2)                 # game object @56
    out += struct.pack("<4i", 0, 1, -1, 5)               # ref info @68
    out += b"\x00" * pad16(len(out))                     # -> 96
    resource_pos = len(out)
    out += struct.pack("<II", 0, 0)                      # resource info @96
    out += b"\x00" * pad16(len(out))                     # -> 112
    userdata_pos = len(out)
    out += struct.pack("<IIQ", 0x1111, 0x2222, 0)        # userdata info @112
    res_string = len(out)
    out += wstr("tex/body.tex")
    ud_string = len(out)
    out += wstr("user/config.user")
    out += b"\x00" * pad16(len(out))
    data_offset = len(out)
    out += single_simple_block(77, base=data_offset)

    struct.pack_into("<II", out, resource_pos, res_string, 0)
    struct.pack_into("<Q", out, userdata_pos + 8, ud_string)
    struct.pack_into("<4s5I4Q", out, 0, b"PFB\x00", 1, 1, 1, 1, 0, 68, 96, 112, data_offset)
    return bytes(out)


def build_usr() -> bytes:
    out = bytearray(48)
    out += struct.pack("<II", 0, 0)                      # resource info @48
    out += b"\x00" * pad16(len(out))                     # -> 64
    res_string = len(out)
    out += wstr("motion/idle.motlist")
    out += b"\x00" * pad16(len(out))
    data_offset = len(out)
    out += single_simple_block(5, base=data_offset)

    struct.pack_into("<II", out, 48, res_string, 0)
    struct.pack_into("<4s3I3QQ", out, 0, b"USR\x00", 1, 0, 1, 48, 64, data_offset, 0)
    return bytes(out)


def build_fchar() -> bytes:
    """
    Two styles, one action list with one object, two data lists. Every RSZ
    pointer gets its own block whose app.Simple.Count is the block number.
    """
    blocks_at = 416
    block_offsets = [blocks_at + BLOCK_SIZE * k for k in range(6)]
    r_default, r_style, r_action, r_object, r_data, r_personal = block_offsets

    out = bytearray(blocks_at)
    magic = struct.unpack("<I", b"CHAR")[0]
    struct.pack_into("<2I9Q4I", out, 0,
                     12, magic, 96, 104, 112, 320, 336, 0, 0, r_personal, 0,
                     0, 2, 2, 0)
    struct.pack_into("<2i", out, 96, 100, 101)            # id table
    struct.pack_into("<2i", out, 104, -1, 100)            # parent id table
    struct.pack_into("<2Q", out, 112, 128, 176)           # action list table, style data
    struct.pack_into("<3Q2I", out, 128, 0, r_default, 320, 1, 0)
    struct.pack_into("<Q", out, 160, 208)                 # action list pointer
    struct.pack_into("<3Q", out, 176, 0, r_style, 0)      # style data
    struct.pack_into("<3Q2I4i", out, 208, 256, r_action, 0, 1, 1, 9001, 60, 10, 20)
    struct.pack_into("<Q", out, 256, 272)                 # object pointer
    struct.pack_into("<3Q2i2i", out, 272, 0, r_object, 0, 1, 0, 3, 7)
    struct.pack_into("<2I", out, 320, 31, 999)            # data ids
    struct.pack_into("<2Q", out, 336, 352, 384)           # data list pointers
    struct.pack_into("<3QII", out, 352, 0, r_data, 0, 1, 42)
    struct.pack_into("<3QI", out, 384, 0, r_data, 0, 0)

    for k, offset in enumerate(block_offsets):
        assert len(out) == offset
        out += single_simple_block(k, base=offset)
    return bytes(out)


def count_of(block) -> int:
    return block.instances[0]["Count"].value


class TestContainers(unittest.TestCase):

    def setUp(self):
        self.registry = TypeRegistry.from_dict(SCHEMA)

    def test_pfb(self):
        pfb = PfbFile(self.registry).read(build_pfb())
        self.assertEqual(pfb.header.signature, b"PFB\x00")
        self.assertEqual([(g.id, g.parent_id, g.component_count) for g in pfb.gameobjects], [(0, -1, 2)])
        self.assertEqual(pfb.gameobject_ref_infos[0].target_id, 5)
        self.assertEqual(pfb.resource_infos[0].string, "tex/body.tex")
        self.assertEqual((pfb.userdata_infos[0].hash, pfb.userdata_infos[0].string),
                         (0x1111, "user/config.user"))
        self.assertEqual(pfb.rsz.instances[0].hash, SIMPLE_HASH)
        self.assertEqual(count_of(pfb.rsz), 77)

    def test_usr(self):
        usr = UsrFile(self.registry).read(build_usr())
        self.assertEqual(usr.resource_infos[0].string, "motion/idle.motlist")
        self.assertEqual(usr.userdata_infos, [])
        self.assertEqual(count_of(usr.rsz), 5)

    def test_fchar(self):
        with self.assertLogs("rszkit.fchar.fchar_file", level="INFO") as cm:
            fchar = FcharFile(self.registry).read(build_fchar())
        self.assertIn("Parsing style data...", "\n".join(cm.output))

        self.assertEqual(fchar.header.version, 12)
        self.assertEqual(fchar.id_table, [100, 101])
        self.assertEqual(fchar.parent_id_table, [-1, 100])
        self.assertEqual(fchar.action_list_table.style_data_offsets, [176])
        self.assertEqual(count_of(fchar.default_style_data), 0)
        self.assertEqual([count_of(s.rsz) for s in fchar.style_data], [1])

        self.assertEqual(len(fchar.action_list), 1)
        action_list = fchar.action_list[0]
        self.assertEqual(action_list.info.action_data.action_id, 9001)
        self.assertEqual(action_list.info.action_data.key_end_frame, 20)
        self.assertEqual(count_of(action_list.action), 2)
        self.assertEqual(len(action_list.objects), 1)
        obj = action_list.objects[0]
        self.assertEqual(obj.info.object_data.data_count, 1)
        self.assertEqual((obj.info.object_data.key_data[0].key_start_frame,
                          obj.info.object_data.key_data[0].key_end_frame), (3, 7))
        self.assertEqual(count_of(obj.action), 3)

        self.assertEqual(fchar.data_id_table, [DataId.HurtBox, 999])
        self.assertIsInstance(fchar.data_id_table[0], DataId)
        self.assertEqual([item.data_ids for item in fchar.data_list_table], [[42], []])
        self.assertEqual(count_of(fchar.data_list_table[0].data_rsz), 4)
        self.assertEqual(count_of(fchar.personal_data), 5)

    def test_fchar_truncated(self):
        with self.assertRaises(TruncatedInput):
            FcharFile(self.registry).read(build_fchar()[:400])


class TestFactory(unittest.TestCase):

    def setUp(self):
        self.registry = TypeRegistry.from_dict(SCHEMA)

    def test_detects_by_magic(self):
        cases = [
            (build_pfb(), PfbFile),
            (build_usr(), UsrFile),
            (build_fchar(), FcharFile),
            (single_simple_block(1), RszFile),
        ]
        for data, expected in cases:
            with self.subTest(expected=expected.__name__):
                self.assertIsInstance(get_reader_for_data(data, self.registry), expected)

    def test_unsupported(self):
        with self.assertRaises(ValueError):
            get_reader_for_data(b"\x00" * 64, self.registry)
        with self.assertRaises(ValueError):
            get_reader_by_name("scn", self.registry)

    def test_named_reader(self):
        reader = get_reader_by_name("user", self.registry)
        self.assertIsInstance(reader, UsrFile)
        self.assertEqual(count_of(reader.read(build_usr()).rsz), 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
