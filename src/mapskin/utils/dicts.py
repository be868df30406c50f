# src/mapskin/utils/dicts.py
"""
Dictionary helpers shared by the config loader and the preset reconciler.
"""

import copy
from typing import Any, Dict


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Nested dictionaries are merged key by key; any other value in
    ``override`` (lists included) replaces the base value. Keys starting with
    ``_`` are treated as comments and skipped.
    """
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(key, str) and key.startswith("_"):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
