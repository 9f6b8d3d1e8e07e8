from .client import HttpFeedFetcher

__all__ = ["HttpFeedFetcher"]
