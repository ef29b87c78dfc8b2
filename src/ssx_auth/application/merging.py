from __future__ import annotations

from typing import Any, Mapping


def shallow_merge(base: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """New mapping with top-level keys of `overrides` replacing those of `base`."""
    return {**base, **(overrides or {})}


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Recursively merge `overrides` into a copy of `base`.

    Nested mappings are merged key by key; any other value replaces the
    base value. `None` in `overrides` means "not set" and keeps the base.
    Neither input is modified.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged
