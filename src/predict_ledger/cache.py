"""Keyed cache for aggregates touched during one processing pass.

A settlement walks every bet of a market. Without a cache each bet would load
and save its trader, participation and daily record. BatchCache loads each key
at most once, hands out the same mutable object for every later lookup, and
writes every held entry exactly once on commit(). A cache is single-use.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, Optional, TypeVar

log = logging.getLogger("ledger.cache")

K = TypeVar("K")
V = TypeVar("V")

_MISSING = object()


class BatchCache(Generic[K, V]):
    def __init__(
        self,
        loader: Callable[[K], Optional[V]],
        writer: Callable[[V], None],
        name: str = "cache",
    ):
        self._loader = loader
        self._writer = writer
        self._name = name
        self._entries: dict[K, object] = {}
        self._loads = 0
        self._committed = False

    def _check_open(self) -> None:
        if self._committed:
            raise RuntimeError(f"BatchCache {self._name} already committed — create a new one")

    def get(self, key: K) -> Optional[V]:
        """Return the cached entity, loading it on first access. Misses are cached too."""
        self._check_open()
        value = self._entries.get(key, _MISSING)
        if value is _MISSING:
            value = self._loader(key)
            self._loads += 1
            self._entries[key] = value
        return value  # type: ignore[return-value]

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        value = self.get(key)
        if value is None:
            value = factory()
            self._entries[key] = value
        return value

    def commit(self) -> int:
        """Write every held entity once, then close the cache. Returns entities written."""
        self._check_open()
        written = 0
        for value in self._entries.values():
            if value is None:
                continue
            self._writer(value)  # type: ignore[arg-type]
            written += 1
        self._committed = True
        self._entries.clear()
        log.debug("CACHE │ %s committed %d entities (%d loads)", self._name, written, self._loads)
        return written
