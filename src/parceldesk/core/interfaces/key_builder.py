"""Key builder interface."""

from typing import Any, Protocol


class IKeyBuilder(Protocol):
    """Contract for building cache keys from query shape.

    Keys must be deterministic: the same entity and filters always give
    the same key, whatever order the filters were supplied in. Every list
    key of an entity must be matched by ``list_pattern(entity)``.
    """

    def build(self, entity: str, filters: dict[str, Any] | None = None) -> str:
        """Build the key of a filtered list of ``entity``."""
        ...

    def build_detail(self, entity: str, entity_id: Any) -> str:
        """Build the key of one record (or of a record's children)."""
        ...

    def build_static(self, name: str) -> str:
        """Build the key of an unparameterised read."""
        ...

    def list_pattern(self, entity: str) -> str:
        """Regular expression matching every list key of ``entity``."""
        ...
