"""
Process-local lookup cache.

An unbounded map from query to record, valid for one process run. Keys are
spread over lock-striped shards so concurrent lookups for different words
rarely contend. Operations never block on I/O and never suspend.
"""

import threading
from typing import Dict, List, Optional

from lexicon_hub.domain.lookup.models import LookupRecord

DEFAULT_SHARDS = 16


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: Dict[str, LookupRecord] = {}


class ProcessCache:
    """
    Sharded concurrent cache.

    Records are copied on the way in and on the way out so callers can
    relabel what they receive without touching the cached copy.
    """

    def __init__(self, shards: int = DEFAULT_SHARDS) -> None:
        if shards < 1:
            raise ValueError("shards must be >= 1")
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]

    def _shard_for(self, query: str) -> _Shard:
        return self._shards[hash(query) % len(self._shards)]

    def get(self, query: str) -> Optional[LookupRecord]:
        shard = self._shard_for(query)
        with shard.lock:
            record = shard.entries.get(query)
        return record.model_copy(deep=True) if record is not None else None

    def insert(self, query: str, record: LookupRecord) -> None:
        """Store a copy of record, replacing any existing entry."""
        copy = record.model_copy(deep=True)
        shard = self._shard_for(query)
        with shard.lock:
            shard.entries[query] = copy

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total

    def __contains__(self, query: object) -> bool:
        if not isinstance(query, str):
            return False
        shard = self._shard_for(query)
        with shard.lock:
            return query in shard.entries
