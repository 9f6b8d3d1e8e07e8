from .seen_store import SeenState, SeenStore

__all__ = ["SeenState", "SeenStore"]
