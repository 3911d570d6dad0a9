# Infrastructure Card Stores Package
from .json_store import JsonCardStore
from .memory_store import MemoryCardStore

__all__ = ["MemoryCardStore", "JsonCardStore"]
