"""
Core domain models and pure functions for alertfeed.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    FEED_PRIORITY,
    AlertRecord,
    AreaGroup,
    FeedType,
    FetchResult,
    PointObservation,
    SeverityLevel,
)
from .errors import AlertFeedError, MalformedPayloadError, TransportError

__all__ = [
    "FEED_PRIORITY",
    "AlertRecord",
    "AreaGroup",
    "FeedType",
    "FetchResult",
    "PointObservation",
    "SeverityLevel",
    "AlertFeedError",
    "MalformedPayloadError",
    "TransportError",
]
