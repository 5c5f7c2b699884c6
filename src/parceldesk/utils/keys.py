"""Helpers for building cache keys."""

import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Serialise a value to JSON deterministically.

    Keys are sorted and separators are compact, so two dicts with the
    same content always give the same string.

    Args:
        value: Any JSON-serializable value; unknown types use ``str()``.

    Returns:
        The canonical JSON text.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
