"""
Adapters for alertfeed.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .http import HttpFeedFetcher
from .storage import SQLiteKVStore, MemoryKVStore
from .homeassistant import HAClient
from .notify import HANotificationSink, MqttNotificationSink, LogNotificationSink

__all__ = [
    "HttpFeedFetcher",
    "SQLiteKVStore",
    "MemoryKVStore",
    "HAClient",
    "HANotificationSink",
    "MqttNotificationSink",
    "LogNotificationSink",
]
