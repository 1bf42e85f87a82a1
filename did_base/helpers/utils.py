"""General utilities for the procedure engine.

This module collects the small containers that :func:`did_base.proceed`
relies on for grouping arguments across specifications.  Two notions of
"sameness" coexist in the engine:

* object identity, used for steps flagged ``by_id`` and for counting how
  many traces currently reference a given object, and
* value equality (:func:`isequal`), used for all other steps.

:class:`IdentityDict` implements the first and :class:`EqualityGroups`
the second.  The module also exposes the console helper used for
verbose traces.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterator, List, MutableMapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def log_proceed(message: str) -> None:
    print(f"[PROCEED] {message}")


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


# ----------------------------
# Value equality
# ----------------------------
def isequal(a: Any, b: Any) -> bool:
    """Return ``True`` if ``a`` and ``b`` hold the same value.

    Unlike ``==`` this always returns a plain ``bool``: NaN equals NaN,
    numpy arrays and pandas objects are compared as whole values and an
    ambiguous truth value counts as "not equal".
    """
    if a is b:
        return True
    if isinstance(a, float) and isinstance(b, float):
        if math.isnan(a) and math.isnan(b):
            return True
        return a == b
    if isinstance(a, (pd.DataFrame, pd.Series, pd.Index)):
        return type(a) is type(b) and bool(a.equals(b))
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        if not (isinstance(a, np.ndarray) and isinstance(b, np.ndarray)):
            return False
        if a.shape != b.shape:
            return False
        try:
            return bool(np.array_equal(a, b, equal_nan=True))
        except TypeError:
            # equal_nan is not supported for object/str dtypes
            return bool(np.array_equal(a, b))
    if isinstance(a, (tuple, list)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(isequal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        if not isinstance(b, dict) or a.keys() != b.keys():
            return False
        return all(isequal(a[k], b[k]) for k in a)
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False


# ----------------------------
# Identity-keyed mapping
# ----------------------------
class IdentityDict(MutableMapping):
    """A mapping keyed by object identity rather than by value.

    Every key is kept alive by the mapping itself, so an ``id`` cannot be
    recycled for a different object while its entry exists.
    """

    def __init__(self) -> None:
        self._data: Dict[int, Tuple[Any, Any]] = {}

    def __getitem__(self, key: Any) -> Any:
        try:
            return self._data[id(key)][1]
        except KeyError:
            raise KeyError(key) from None

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[id(key)] = (key, value)

    def __delitem__(self, key: Any) -> None:
        try:
            del self._data[id(key)]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: Any) -> bool:
        return id(key) in self._data

    def __iter__(self) -> Iterator[Any]:
        return (k for k, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._data.values())
        return f"IdentityDict({{{items}}})"


def count_object(counter: IdentityDict, obj: Any) -> int:
    """Increase the reference count of ``obj`` by one and return it."""
    n = counter.get(obj, 0) + 1
    counter[obj] = n
    return n


# ----------------------------
# Argument grouping
# ----------------------------
_UNHASHABLE = object()
_NAN = object()
_ATOMS = (str, bytes, int, float, bool, type(None))


def _is_atom(a: Any) -> bool:
    if isinstance(a, _ATOMS):
        return True
    return type(a) is tuple and all(_is_atom(x) for x in a)


def _atom_key(a: Any) -> Any:
    # The type is part of the key so that 1, 1.0 and True stay apart.
    if type(a) is tuple:
        return (tuple, tuple(_atom_key(x) for x in a))
    if isinstance(a, float) and math.isnan(a):
        return (float, _NAN)
    return (type(a), a)


def _hash_key(key: Any) -> Any:
    """Replace float NaNs so that keys equal under :func:`isequal` hash alike."""
    if isinstance(key, tuple):
        return tuple(_hash_key(x) for x in key)
    if isinstance(key, float) and math.isnan(key):
        return _NAN
    return key


class EqualityGroups:
    """Ordered buckets of indices keyed by value-equal argument tuples.

    Hashable keys are located through a hash lookup; keys holding
    unhashable values (lists, arrays, frames) share one bucket that is
    scanned linearly with :func:`isequal`.
    """

    def __init__(self) -> None:
        self._keys: List[Tuple[Any, ...]] = []
        self._ids: List[List[int]] = []
        self._buckets: Dict[Any, List[int]] = {}

    def add(self, key: Tuple[Any, ...], idx: int) -> None:
        try:
            h: Any = hash(_hash_key(key))
        except TypeError:
            h = _UNHASHABLE
        bucket = self._buckets.setdefault(h, [])
        for pos in bucket:
            if isequal(self._keys[pos], key):
                self._ids[pos].append(idx)
                return
        bucket.append(len(self._keys))
        self._keys.append(key)
        self._ids.append([idx])

    def items(self) -> Iterator[Tuple[Tuple[Any, ...], List[int]]]:
        return zip(self._keys, self._ids)

    def __len__(self) -> int:
        return len(self._keys)


class IdentityGroups:
    """Ordered buckets of indices keyed by element-wise identity of tuples.

    Immutable atoms (strings, bytes, numbers, ``None`` and tuples made of
    these) are compared by type and value instead.
    """

    def __init__(self) -> None:
        self._groups: Dict[Tuple[Any, ...], Tuple[Tuple[Any, ...], List[int]]] = {}

    def add(self, key: Tuple[Any, ...], idx: int) -> None:
        k = tuple(_atom_key(a) if _is_atom(a) else (id, id(a)) for a in key)
        if k in self._groups:
            self._groups[k][1].append(idx)
        else:
            self._groups[k] = (key, [idx])

    def items(self) -> Iterator[Tuple[Tuple[Any, ...], List[int]]]:
        return iter(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)


def first_or_last(trace: Dict[str, Any], field: str = "result") -> Optional[Any]:
    """Pick the canonical value of a trace: ``field`` if present, else the last one."""
    if field in trace:
        return trace[field]
    if not trace:
        return None
    return next(reversed(trace.values()))


def subset_fields(trace: Dict[str, Any], names: Sequence[str]) -> Dict[str, Any]:
    return {n: trace[n] for n in names if n in trace}


__all__ = [
    "IdentityDict",
    "IdentityGroups",
    "EqualityGroups",
    "isequal",
    "count_object",
    "first_or_last",
    "subset_fields",
    "log_proceed",
]
