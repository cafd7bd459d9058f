from .writer import VaultWriter, WriteResult

__all__ = ["VaultWriter", "WriteResult"]
