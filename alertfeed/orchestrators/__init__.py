"""
Orchestrators for alertfeed.

This module contains the poll scheduler that drives
fetch -> normalize -> dispatch cycles.
"""

from .scheduler import PollScheduler

__all__ = ["PollScheduler"]
