"""
Tiered lookup service.

Resolution order for a single query:

1. Process cache (skipped when skip_cache is set)
2. Persistent store (skipped when skip_cache is set)
3. Remote provider

A remote result that was found is written back to both tiers before it is
returned, unless skip_cache is set.
"""

import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Optional

from lexicon_hub.config.settings import ProviderCredentials
from lexicon_hub.domain.lookup.models import LookupRecord
from lexicon_hub.domain.lookup.normalizer import normalize_query
from lexicon_hub.domain.lookup.provenance import (
    served_from_cache,
    served_from_store,
    stamped_for_write,
)
from lexicon_hub.exceptions import CorruptRecord, LookupStage, StoreError
from lexicon_hub.infrastructure.providers.youdao_provider import RemoteProvider
from lexicon_hub.infrastructure.storage.persistent_store import PersistentStore
from lexicon_hub.infrastructure.storage.process_cache import ProcessCache
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LookupStatistics:
    """Per-process counters of which tier answered each lookup."""

    cache_hits: int = 0
    store_hits: int = 0
    store_read_errors: int = 0
    remote_calls: int = 0
    remote_not_found: int = 0
    write_throughs: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class LookupService:
    """
    Cache-aside lookup over process cache, persistent store and a remote
    provider.

    Args:
        store: Durable store, already initialized.
        cache: Process-local cache shared by all lookups.
        provider: Remote provider consulted on a full miss.
        credentials: Callable returning a credentials snapshot; called once
            per remote fetch.
        clock: Returns the current unix time in seconds.
    """

    def __init__(
        self,
        store: PersistentStore,
        cache: ProcessCache,
        provider: RemoteProvider,
        credentials: Callable[[], ProviderCredentials],
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.provider = provider
        self._credentials = credentials
        self._clock = clock or time.time
        self.stats = LookupStatistics()

    async def lookup(
        self, query: str, skip_cache: bool = False, force_long_text: bool = False
    ) -> LookupRecord:
        """
        Resolve query through the tiers.

        Raises:
            ValueError: If query is empty after normalization.
            ConfigurationError: If the provider is not configured.
            ProviderError: If the remote call fails.
            StoreError: If writing a fresh remote result to the store fails.
        """
        key = normalize_query(query)

        if not skip_cache:
            cached = self.cache.get(key)
            if cached is not None:
                self.stats.cache_hits += 1
                logger.debug("lookup.cache_hit", query=key)
                return served_from_cache(cached)

            stored = await self._read_store(key)
            if stored is not None:
                self.stats.store_hits += 1
                self.cache.insert(key, stored)
                logger.debug(
                    "lookup.store_hit", query=key, origin=stored.origin.label()
                )
                return served_from_store(stored)

        record = await self._fetch_remote(key)
        if force_long_text and not record.is_long_text:
            record = record.model_copy(update={"is_long_text": True})

        if not record.found:
            self.stats.remote_not_found += 1
            logger.info("lookup.remote.not_found", query=key)
            return record

        if not skip_cache:
            record = stamped_for_write(record, int(self._clock()))
            self.cache.insert(key, record)
            await self._write_through(key, record)

        return record

    async def _read_store(self, key: str) -> Optional[LookupRecord]:
        # A broken row must not block lookups; fall through to the provider
        try:
            return await self.store.get(key)
        except CorruptRecord as e:
            self.stats.store_read_errors += 1
            logger.warning("lookup.store.corrupt_record", query=key, **e.to_dict())
        except StoreError as e:
            self.stats.store_read_errors += 1
            logger.warning("lookup.store.read_failed", query=key, **e.to_dict())
        return None

    async def _fetch_remote(self, key: str) -> LookupRecord:
        credentials = self._credentials()
        self.stats.remote_calls += 1
        record = await self.provider.fetch(key, credentials)
        logger.info(
            "lookup.remote.fetched",
            query=key,
            provider=self.provider.provider_id.value,
            found=record.found,
        )
        return record

    async def _write_through(self, key: str, record: LookupRecord) -> None:
        try:
            await self.store.put(key, record)
        except StoreError as e:
            logger.error("lookup.write_through.failed", query=key, **e.to_dict())
            raise StoreError(
                f"Fetched '{key}' but could not persist it: {e.message}",
                stage=LookupStage.WRITE_THROUGH.value,
                original_error=e,
            ) from e
        self.stats.write_throughs += 1
