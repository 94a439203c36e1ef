from .usr_file import UsrFile, USR_MAGIC

__all__ = ['UsrFile', 'USR_MAGIC']
