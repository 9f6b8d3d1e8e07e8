from .source import FeedSource

__all__ = ["FeedSource"]
