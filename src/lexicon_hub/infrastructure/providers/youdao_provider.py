"""
Remote provider protocol and its Youdao implementation.

The lookup service only depends on the RemoteProvider protocol, so tests
substitute a stub and other providers can be added without touching the
orchestrator.
"""

import asyncio
from typing import Optional, Protocol

from lexicon_hub.config.settings import ProviderCredentials
from lexicon_hub.domain.lookup.models import LookupRecord, RemoteSource
from lexicon_hub.io.connectors.youdao.client import YoudaoClient
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


class RemoteProvider(Protocol):
    """Protocol for remote dictionary providers."""

    provider_id: RemoteSource

    async def fetch(
        self, query: str, credentials: ProviderCredentials
    ) -> LookupRecord:
        """
        Look up query remotely.

        Raises:
            ConfigurationError: If credentials are absent.
            ProviderError: If the remote call fails.
        """
        ...


class YoudaoProvider:
    """Async adapter running the blocking Youdao client in a worker thread."""

    provider_id = RemoteSource.YOUDAO

    def __init__(self, client: Optional[YoudaoClient] = None) -> None:
        self.client = client or YoudaoClient()
        logger.debug("youdao_provider.initialized", base_url=self.client.base_url)

    async def fetch(
        self, query: str, credentials: ProviderCredentials
    ) -> LookupRecord:
        return await asyncio.to_thread(self.client.translate, query, credentials)

    def close(self) -> None:
        self.client.close()
