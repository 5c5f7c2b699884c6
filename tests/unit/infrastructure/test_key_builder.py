"""Tests for DefaultKeyBuilder."""

import re
from datetime import date

from parceldesk.infrastructure.key_builders.default import DefaultKeyBuilder
from parceldesk.utils.keys import canonical_json


class TestDefaultKeyBuilder:
    """Tests for DefaultKeyBuilder."""

    def test_build_without_filters(self) -> None:
        builder = DefaultKeyBuilder()

        assert builder.build("packages") == "packages:{}"
        assert builder.build("packages", {}) == "packages:{}"

    def test_build_is_order_independent(self) -> None:
        """Equal filter sets produce equal keys whatever the insertion order."""
        builder = DefaultKeyBuilder()

        first = builder.build("packages", {"status": "arrived", "priority_level": "high"})
        second = builder.build("packages", {"priority_level": "high", "status": "arrived"})

        assert first == second
        assert first == 'packages:{"priority_level":"high","status":"arrived"}'

    def test_different_filters_differ(self) -> None:
        builder = DefaultKeyBuilder()

        assert builder.build("packages", {"status": "arrived"}) != builder.build(
            "packages", {"status": "received"}
        )

    def test_build_detail(self) -> None:
        builder = DefaultKeyBuilder()

        assert builder.build_detail("package", 42) == "package:42"
        assert builder.build_detail("documents", "abc") == "documents:abc"

    def test_build_static(self) -> None:
        assert DefaultKeyBuilder().build_static("users") == "users"

    def test_list_pattern_scope(self) -> None:
        """The package list pattern leaves detail and other keys alone."""
        builder = DefaultKeyBuilder()
        pattern = re.compile(builder.list_pattern("packages"))

        assert pattern.search(builder.build("packages", {"status": "arrived"}))
        assert not pattern.search(builder.build_detail("package", 1))
        assert not pattern.search(builder.build_detail("documents", 1))
        assert not pattern.search("users")


class TestCanonicalJson:
    """Tests for canonical_json."""

    def test_sorted_and_compact(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_nested_dicts_are_sorted(self) -> None:
        assert canonical_json({"x": {"z": 1, "y": 2}}) == '{"x":{"y":2,"z":1}}'

    def test_non_json_values_use_str(self) -> None:
        assert canonical_json({"since": date(2024, 1, 2)}) == '{"since":"2024-01-02"}'
