"""
Application state shared by the CLI commands.

AppState owns the persistent store, the process cache and the remote
provider for one process run. Build it with build_app_state() and close it
when done:

    >>> state = await build_app_state()
    >>> try:
    ...     record = await state.lookup.lookup("cat")
    ... finally:
    ...     await state.close()
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from lexicon_hub.application.lookup import LookupService
from lexicon_hub.config.settings import Settings, SettingsHolder, get_settings
from lexicon_hub.infrastructure.providers.youdao_provider import (
    RemoteProvider,
    YoudaoProvider,
)
from lexicon_hub.infrastructure.storage.persistent_store import PersistentStore
from lexicon_hub.infrastructure.storage.process_cache import ProcessCache
from lexicon_hub.io.connectors.youdao.client import YoudaoClient
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AppState:
    config: SettingsHolder
    store: PersistentStore
    cache: ProcessCache
    provider: RemoteProvider
    lookup: LookupService
    http_session: requests.Session = field(default_factory=requests.Session)

    @property
    def settings(self) -> Settings:
        return self.config.settings

    async def status(self) -> Dict[str, Any]:
        """Diagnostics for the --status command."""
        settings = self.settings
        return {
            "database_path": str(settings.database_path),
            "stored_records": await self.store.count(),
            "cache_entries": len(self.cache),
            "provider": self.provider.provider_id.value,
            "provider_configured": self.config.credentials().is_configured,
            "lookup_stats": self.lookup.stats.to_dict(),
        }

    async def close(self) -> None:
        await self.store.close()
        close_provider = getattr(self.provider, "close", None)
        if callable(close_provider):
            close_provider()
        self.http_session.close()
        logger.debug("app_state.closed")


async def build_app_state(
    settings: Optional[Settings] = None,
    provider: Optional[RemoteProvider] = None,
) -> AppState:
    """
    Wire up and initialize the store, cache, provider and lookup service.

    Args:
        settings: Settings to use. Defaults to get_settings().
        provider: Remote provider. Defaults to YoudaoProvider.
    """
    settings = settings or get_settings()
    holder = SettingsHolder(settings)

    store = PersistentStore(settings.database_path)
    await store.initialize()

    cache = ProcessCache(shards=settings.cache_shards)
    provider = provider or YoudaoProvider(
        YoudaoClient(
            base_url=settings.youdao_base_url,
            timeout=settings.request_timeout,
            proxies=settings.proxies,
        )
    )
    http_session = requests.Session()
    if settings.proxies:
        http_session.proxies.update(settings.proxies)

    lookup = LookupService(
        store=store,
        cache=cache,
        provider=provider,
        credentials=holder.credentials,
    )
    logger.debug(
        "app_state.initialized",
        database_path=str(settings.database_path),
        cache_shards=settings.cache_shards,
    )
    return AppState(
        config=holder,
        store=store,
        cache=cache,
        provider=provider,
        lookup=lookup,
        http_session=http_session,
    )
