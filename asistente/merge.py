"""Recursive merge of partial mock records."""

from collections.abc import Mapping
from typing import Any


def merge_deep(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *source* into a copy of *target*.

    Leaf conflicts are won by *source*. When both sides hold a mapping under
    the same key the two are merged recursively; a mapping in *source* whose
    key is absent from *target* is taken as is. Lists count as leaves.
    Neither input is mutated.
    """
    output = dict(target)
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), Mapping):
            output[key] = merge_deep(target[key], value)
        elif isinstance(value, Mapping):
            output[key] = merge_deep({}, value)
        else:
            output[key] = value
    return output
