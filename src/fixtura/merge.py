"""Deep merge of attribute trees.

Merging never resolves associations: a placeholder on the override side
replaces the base value wholesale so it can be resolved lazily later.
"""

from collections.abc import Mapping
from typing import Any

from fixtura.association import is_association


def _copy_value(value: Any) -> Any:
    """Return a fresh container for dicts and lists, the value itself otherwise."""
    if is_association(value):
        return value
    if isinstance(value, Mapping):
        return merge_deep(value)
    if isinstance(value, list):
        return list(value)
    return value


def merge_deep(
    base: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge ``override`` on top of ``base`` without mutating either.

    Rules, evaluated per key:

    1. An association on the override side replaces the base value.
    2. Two lists are concatenated, base elements first.
    3. Two mappings are merged recursively.
    4. Otherwise the override value wins, including an explicit ``None``.

    Args:
        base: Default attributes.
        override: Attributes that take precedence over ``base``.

    Returns:
        A new dict. Nested dicts and lists are new containers too.
    """
    merged: dict[str, Any] = {}
    for key, value in (base or {}).items():
        merged[key] = _copy_value(value)

    for key, value in (override or {}).items():
        current = merged.get(key)
        if is_association(value):
            merged[key] = value
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + list(value)
        elif (
            key in merged
            and isinstance(current, Mapping)
            and isinstance(value, Mapping)
        ):
            merged[key] = merge_deep(current, value)
        else:
            merged[key] = _copy_value(value)

    return merged
