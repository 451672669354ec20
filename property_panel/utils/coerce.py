"""Loose value coercion and ranked field lookup for provider payloads."""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def to_number(v: Any) -> Optional[float]:
    """Coerce ints, floats and currency strings ("$1,234.50") to a finite number.

    Returns None for anything that does not survive the cleanup.
    """

    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, np.integer)):
        return int(v)
    if isinstance(v, (float, np.floating)):
        return float(v) if np.isfinite(v) else None
    if not isinstance(v, str):
        return None
    cleaned = _NON_NUMERIC.sub("", v)
    if not cleaned:
        return None
    try:
        parsed = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def to_int(v: Any) -> Optional[int]:
    number = to_number(v)
    if number is None:
        return None
    return int(number)


def to_str(v: Any) -> str:
    return "" if v is None else str(v).strip()


def round2(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(float(value), 2)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def pick_first(record: Any, candidate_keys: Iterable[str]) -> Any:
    """Return the first candidate key holding a non-null, non-empty value.

    Only direct keys of ``record`` are searched; nested objects have to be
    selected by the caller.
    """

    if not isinstance(record, Mapping):
        return None
    for key in candidate_keys:
        if key not in record:
            continue
        value = record[key]
        if _is_blank(value):
            continue
        return value
    return None


def sub_object(record: Any, path: Sequence[str]) -> Optional[Mapping[str, Any]]:
    """Walk ``path`` through nested mappings, returning None when a hop is missing."""

    current = record
    for part in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current if isinstance(current, Mapping) else None


def pick_path(record: Any, table: Sequence[tuple]) -> Any:
    """Resolve a ranked table of ``(path, keys)`` entries against ``record``.

    ``path`` is a tuple of nested object names (empty for top level) and
    ``keys`` the ranked candidate field names inside that object.
    """

    for path, keys in table:
        scope = sub_object(record, path)
        value = pick_first(scope, keys)
        if value is not None:
            return value
    return None


__all__ = ["to_number", "to_int", "to_str", "round2", "pick_first", "pick_path", "sub_object"]
