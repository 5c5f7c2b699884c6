"""Cache key builder implementations."""

from parceldesk.infrastructure.key_builders.default import DefaultKeyBuilder

__all__ = ["DefaultKeyBuilder"]
