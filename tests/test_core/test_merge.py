"""Tests for deep merging of attribute trees."""

import copy

from fixtura import define
from fixtura.merge import merge_deep


class TestMergeDeep:
    """Tests for merge_deep."""

    def test_empty_override_keeps_tree(self) -> None:
        """Merging with an empty override yields an equal tree."""
        tree = {
            "name": "X",
            "tags": ["a", "b"],
            "address": {"city": "NY", "geo": {"lat": 1.5}},
        }
        assert merge_deep(tree, {}) == tree
        assert merge_deep(tree) == tree

    def test_none_base(self) -> None:
        assert merge_deep(None, {"a": 1}) == {"a": 1}

    def test_override_wins_for_scalars(self) -> None:
        merged = merge_deep({"name": "John", "age": 20}, {"name": "Jane"})
        assert merged == {"name": "Jane", "age": 20}

    def test_nested_trees_merge(self) -> None:
        """Nested mappings merge key by key."""
        base = {
            "name": "John Doe",
            "email": "test@mail.com",
            "address": {"street": "Main St", "number": 123, "city": "NY"},
        }
        merged = merge_deep(base, {"name": "Jane Doe", "address": {"number": 456}})
        assert merged == {
            "name": "Jane Doe",
            "email": "test@mail.com",
            "address": {"street": "Main St", "number": 456, "city": "NY"},
        }

    def test_lists_concatenate(self) -> None:
        assert merge_deep({"a": [1, 2]}, {"a": [3]}) == {"a": [1, 2, 3]}

    def test_none_override_sticks(self) -> None:
        """An explicit None replaces the default; absent keys keep it."""
        merged = merge_deep({"name": "X", "email": "x@mail.com"}, {"name": None})
        assert "name" in merged
        assert merged["name"] is None
        assert merged["email"] == "x@mail.com"

    def test_mapping_replaces_scalar(self) -> None:
        assert merge_deep({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_association_replaces_instead_of_merging(self) -> None:
        """An association on the override side is kept as-is."""
        placeholder = define(dict, lambda: {"city": "B"}).associate()
        merged = merge_deep({"addr": {"city": "A"}}, {"addr": placeholder})
        assert merged["addr"] is placeholder

    def test_association_in_base_is_kept(self) -> None:
        placeholder = define(dict, lambda: {"city": "B"}).associate()
        merged = merge_deep({"addr": placeholder}, {"name": "x"})
        assert merged["addr"] is placeholder

    def test_inputs_are_not_mutated(self) -> None:
        base = {"tags": ["a"], "address": {"city": "NY"}}
        override = {"tags": ["b"], "address": {"number": 1}}
        base_before = copy.deepcopy(base)
        override_before = copy.deepcopy(override)

        merge_deep(base, override)

        assert base == base_before
        assert override == override_before

    def test_result_does_not_alias_inputs(self) -> None:
        """Mutating the result leaves nested input containers untouched."""
        base = {"tags": ["a"], "address": {"city": "NY"}}
        merged = merge_deep(base, {})

        merged["tags"].append("z")
        merged["address"]["city"] = "LA"

        assert base == {"tags": ["a"], "address": {"city": "NY"}}

    def test_key_order_is_preserved(self) -> None:
        merged = merge_deep({"a": 1, "b": 2}, {"c": 3, "a": 4})
        assert list(merged) == ["a", "b", "c"]
