"""Infrastructure layer implementations for parceldesk."""

from parceldesk.infrastructure.backends import InMemoryCacheBackend
from parceldesk.infrastructure.key_builders import DefaultKeyBuilder

__all__ = [
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
]
