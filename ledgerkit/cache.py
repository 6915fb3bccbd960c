"""A size-bounded cache of account data references keyed by public key."""

from __future__ import annotations

import logging
import threading

from cachetools import LRUCache

from .address import Pubkey
from .descriptors import AccountDataReference

__all__ = ["DEFAULT_CAPACITY", "Cache"]

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1024 * 1024 * 64


def _weight(reference: AccountDataReference) -> int:
    return reference.data_len


class Cache:
    """Account references weighed by their data length, evicted when over capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        logger.debug("init account data cache with %d MiB capacity", capacity // 1024 // 1024)
        self.capacity = capacity
        self._entries: LRUCache = LRUCache(maxsize=capacity, getsizeof=_weight)
        self._lock = threading.RLock()

    def lookup(self, pubkey: Pubkey) -> AccountDataReference | None:
        with self._lock:
            return self._entries.get(pubkey)

    def store(self, reference: AccountDataReference) -> None:
        with self._lock:
            try:
                self._entries[reference.key] = reference
            except ValueError:
                # Heavier than the whole cache: not admitted.
                self._entries.pop(reference.key, None)

    def purge(self, pubkey: Pubkey | None = None) -> None:
        """Drop one entry, or every entry when no key is given."""
        with self._lock:
            if pubkey is None:
                self._entries.clear()
            else:
                self._entries.pop(pubkey, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)