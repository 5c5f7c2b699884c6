"""Cache backend implementations."""

from parceldesk.infrastructure.backends.memory import InMemoryCacheBackend

__all__ = ["InMemoryCacheBackend"]
