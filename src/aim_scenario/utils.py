# aim_scenario/utils.py
# AI-Mind © 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Dot-path access, context merging and layered config views."""

import copy
from collections import ChainMap
from collections.abc import Mapping
from typing import Any, Optional


def split_path(path: str) -> list[str]:
    return [part.strip() for part in path.split('.') if part.strip()]


def deep_set(target: dict[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at a dotted ``path``, creating intermediate dicts.

    An intermediate key holding a scalar (e.g. a flag set earlier) is
    replaced by a dict.
    """
    parts = split_path(path)
    if not parts:
        return

    ref = target
    for key in parts[:-1]:
        if not isinstance(ref.get(key), dict):
            ref[key] = {}
        ref = ref[key]

    ref[parts[-1]] = value


def deep_get(source: Any, path: str) -> Any:
    """Read a dotted ``path`` from nested mappings and lists.

    Returns None when any segment is missing.
    """
    ref = source
    for key in split_path(path):
        if isinstance(ref, Mapping):
            if key not in ref:
                return None
            ref = ref[key]
        elif isinstance(ref, list) and key.isdigit() and int(key) < len(ref):
            ref = ref[int(key)]
        else:
            return None
    return ref


def merge_contexts(a: Mapping[str, Any], b: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two contexts into a new dict.

    Lists concatenate, nested dicts merge recursively, and for anything else
    the value from ``b`` wins.
    """
    target: dict[str, Any] = {}

    for key in dict.fromkeys([*a.keys(), *b.keys()]):
        if key not in a:
            target[key] = copy.deepcopy(b[key])
        elif key not in b:
            target[key] = copy.deepcopy(a[key])
        else:
            value_a, value_b = a[key], b[key]
            if isinstance(value_a, list) and isinstance(value_b, list):
                target[key] = copy.deepcopy([*value_a, *value_b])
            elif isinstance(value_a, Mapping) and isinstance(value_b, Mapping):
                target[key] = merge_contexts(value_a, value_b)
            else:
                target[key] = copy.deepcopy(value_b)

    return target


def merge_configs(base: Mapping[str, Any], extend: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Overlay ``extend`` on ``base``; the ``keys`` section merges one level deep."""
    extend = extend or {}
    merged = {**copy.deepcopy(dict(base)), **copy.deepcopy(dict(extend))}
    merged['keys'] = {**base.get('keys', {}), **extend.get('keys', {})}
    return merged


def inherit(*layers: Optional[Mapping[str, Any]]) -> ChainMap:
    """Build a layered view where earlier layers shadow later ones.

    Layers are copied, so writes through the view never reach the sources.
    """
    return ChainMap(*(copy.deepcopy(dict(layer)) for layer in layers if layer is not None))
