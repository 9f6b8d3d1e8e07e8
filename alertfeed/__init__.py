"""alertfeed: disaster alert feed normalization and notification service."""

__version__ = "0.1.0"
