"""Deep merge used to layer configuration sources.

Semantics:
- Dictionaries merge recursively
- Lists are replaced by the overriding list
- A list whose first element is "+" is appended to the base list
"""
from __future__ import annotations

from typing import Any, Dict, List


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Example:
        >>> deep_merge({"git": {"url": "a", "remote": "origin"}}, {"git": {"url": "b"}})
        {'git': {'url': 'b', 'remote': 'origin'}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if key in result:
            if isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            elif isinstance(result[key], list) and isinstance(value, list):
                result[key] = merge_arrays(result[key], value)
            else:
                result[key] = value
        else:
            result[key] = value
    return result


def merge_arrays(base: List[Any], override: List[Any]) -> List[Any]:
    """Replace ``base`` with ``override`` unless ``override`` starts with ``"+"``.

    >>> merge_arrays([1, 2], [3])
    [3]
    >>> merge_arrays([1, 2], ["+", 3])
    [1, 2, 3]
    """
    if not override:
        return base
    if override[0] == "+":
        return [*base, *override[1:]]
    return list(override)


__all__ = ["deep_merge", "merge_arrays"]
