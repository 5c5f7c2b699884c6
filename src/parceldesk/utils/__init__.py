"""Utility helpers for parceldesk."""

from parceldesk.utils.keys import canonical_json

__all__ = ["canonical_json"]
