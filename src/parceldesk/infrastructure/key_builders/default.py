"""Default key builder implementation."""

import re
from typing import Any

from parceldesk.utils.keys import canonical_json


class DefaultKeyBuilder:
    """Default key builder using the entity name and canonical filters.

    Keys are readable so that invalidation can target them by pattern:

        packages:{}                     every package list variant
        packages:{"status":"arrived"}   starts with ``packages:``
        package:42                      one record
        documents:42                    the documents of package 42
        users                           an unparameterised read
    """

    def build(self, entity: str, filters: dict[str, Any] | None = None) -> str:
        """Build the key of a filtered list of ``entity``.

        Args:
            entity: Entity type, such as ``packages``.
            filters: Filter set applied to the list. None means no filters.

        Returns:
            ``"<entity>:<canonical JSON of filters>"``.
        """
        return f"{entity}:{canonical_json(filters or {})}"

    def build_detail(self, entity: str, entity_id: Any) -> str:
        """Build the key of one record (or of a record's children).

        Args:
            entity: Entity type, such as ``package``.
            entity_id: Identifier of the record.

        Returns:
            ``"<entity>:<id>"``.
        """
        return f"{entity}:{entity_id}"

    def build_static(self, name: str) -> str:
        """Build the key of an unparameterised read."""
        return name

    def list_pattern(self, entity: str) -> str:
        """Regular expression matching every list key of ``entity``."""
        return f"^{re.escape(entity)}:"
