"""
Storage adapters for alertfeed.

This module contains key-value snapshot stores used to persist
the dedup history between polls and across restarts.
"""

from .sqlite_kv import SQLiteKVStore
from .memory_kv import MemoryKVStore

__all__ = ["SQLiteKVStore", "MemoryKVStore"]
