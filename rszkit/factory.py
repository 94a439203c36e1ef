from rszkit.fchar.fchar_file import FcharFile
from rszkit.pfb.pfb_file import PfbFile
from rszkit.rsz.rsz_file import RszFile
from rszkit.usr.usr_file import UsrFile
from rszkit.utils.type_registry import TypeRegistry

READERS = {
    "fchar": FcharFile,
    "pfb": PfbFile,
    "user": UsrFile,
    "rsz": RszFile,
}


def get_reader_for_data(data: bytes, registry: TypeRegistry, relative_strings: bool = False):
    for reader_class in [
        PfbFile,
        UsrFile,
        RszFile,
        FcharFile,  # Magic sits at offset 4, check last
    ]:
        if reader_class.can_handle(data):
            return reader_class(registry, relative_strings)
    raise ValueError("Unsupported file type")


def get_reader_by_name(name: str, registry: TypeRegistry, relative_strings: bool = False):
    try:
        reader_class = READERS[name]
    except KeyError:
        raise ValueError(f"Unknown format: {name}") from None
    return reader_class(registry, relative_strings)
