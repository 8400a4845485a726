from .filesystem import FilesystemStore
from .interface import LedgerStore
from .memory import MemoryStore

__all__ = ["FilesystemStore", "LedgerStore", "MemoryStore"]
