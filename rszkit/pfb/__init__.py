from .pfb_file import PfbFile, PFB_MAGIC

__all__ = ['PfbFile', 'PFB_MAGIC']
