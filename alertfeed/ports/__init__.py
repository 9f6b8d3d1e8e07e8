"""
Port interfaces for alertfeed.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .fetch import FetchPort
from .kvstore import KVStorePort
from .notify import NotificationSink

__all__ = ["FetchPort", "KVStorePort", "NotificationSink"]
