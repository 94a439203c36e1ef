from .fchar_file import FcharFile, FCHAR_MAGIC
from .fchar_data_types import DataId

__all__ = ['FcharFile', 'FCHAR_MAGIC', 'DataId']
