from .client import HAClient

__all__ = ["HAClient"]
