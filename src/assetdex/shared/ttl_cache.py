# src/assetdex/shared/ttl_cache.py
"""
TTL Cache - In-Memory Key/Value Store with Expiry and Prefix Invalidation

This module implements the process-wide result cache. One instance is
created by the composition root at startup and passed to every service
that needs it; tests create a fresh instance each.

Expired entries are removed lazily on access, and with a small probability
after each ``set`` a sweep removes every expired entry so keys that are
never read again do not accumulate.

Concurrent ``get_or_set`` misses for the same key are not collapsed: each
caller runs its own producer and the last write wins.

Files that USE this module:
- assetdex.app (creates the single cache instance)
- assetdex.application.* (analysis, discovery, asset, ledger services)
- tests.test_ttl_cache (unit tests)

Files that this module USES:
- None (pure utility implementation)
"""
from __future__ import annotations

import dataclasses
import inspect
import logging
import random
import time
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

log = logging.getLogger(__name__)

# Largest integer a JSON consumer can hold without precision loss (2**53 - 1)
MAX_SAFE_INTEGER = 9_007_199_254_740_991

DEFAULT_TTL_SECONDS = 300


@dataclass
class CacheEntry:
    value: Any
    expiry: float


def sanitize(value: Any) -> Any:
    """
    Convert a value into a JSON-representable structure.

    Integers beyond the JSON-safe range and Decimals become decimal strings;
    dataclasses become dicts, tuples become lists, enums their value and
    datetimes ISO 8601 strings.

    Args:
        value: Value to sanitize

    Returns:
        Sanitized copy of the value
    """
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            return str(value)
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return sanitize(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: sanitize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): sanitize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [sanitize(v) for v in value]
    return value


Producer = Callable[[], Union[Awaitable[Any], Any]]


class TTLCache:
    """Simple in-memory cache with per-entry TTL."""

    def __init__(
        self,
        sweep_probability: float = 0.01,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
    ):
        """
        Initialize the cache.

        Args:
            sweep_probability: Chance that a set() call also sweeps expired entries
            clock: Monotonic time source in seconds
            rng: Random source in [0, 1) used to decide sweeps
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._sweep_probability = sweep_probability
        self._clock = clock
        self._rng = rng

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry) -> bool:
        return self._clock() >= entry.expiry

    def get(self, key: str) -> Optional[Any]:
        """
        Return the live value for a key.

        Args:
            key: Cache key

        Returns:
            Stored value, or None when absent or expired
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL_SECONDS) -> Any:
        """
        Store a sanitized value with the given TTL.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time to live in seconds

        Returns:
            The sanitized value as stored
        """
        stored = sanitize(value)
        self._entries[key] = CacheEntry(value=stored, expiry=self._clock() + ttl)
        if self._entries and self._rng() < self._sweep_probability:
            self.sweep()
        return stored

    def exists(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._expired(entry):
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate(self, prefix: str) -> int:
        """
        Remove every key that starts with ``prefix``.

        Args:
            prefix: Key prefix, e.g. 'user-cards:0xabc'

        Returns:
            Number of removed entries
        """
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            log.debug("Invalidated %d cache entries with prefix %r", len(doomed), prefix)
        return len(doomed)

    def sweep(self) -> int:
        """Remove all expired entries; returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expiry]
        for key in expired:
            del self._entries[key]
        if expired:
            log.debug("Cache sweep removed %d expired entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_set(self, key: str, producer: Producer, ttl: float = DEFAULT_TTL_SECONDS) -> Any:
        """
        Return the live value for a key, producing and storing it on a miss.

        The producer is called once per miss. If it raises, the exception
        propagates and nothing is cached.

        Args:
            key: Cache key
            producer: Zero-argument callable returning a value or an awaitable
            ttl: Time to live in seconds

        Returns:
            The cached (sanitized) value
        """
        cached = self.get(key)
        if cached is not None:
            log.debug("Cache hit: %s", key)
            return cached

        log.debug("Cache miss: %s", key)
        result = producer()
        if inspect.isawaitable(result):
            result = await result
        return self.set(key, result, ttl)
