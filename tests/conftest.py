"""Shared pytest fixtures: isolated settings, stores, stub providers and
legacy database builders.

Every test gets its own data directory under tmp_path; no test touches the
user's real ~/.config/lexicon-hub.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pytest
import pytest_asyncio
from sqlalchemy import create_engine, text

from lexicon_hub.config.settings import ProviderCredentials, Settings, get_settings
from lexicon_hub.domain.lookup.models import LookupRecord, Origin, RemoteSource
from lexicon_hub.exceptions import ProviderError
from lexicon_hub.infrastructure.storage.persistent_store import PersistentStore
from lexicon_hub.infrastructure.storage.process_cache import ProcessCache


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Point settings at a temp directory and drop any cached instance."""
    for key in ("LEXICON_YOUDAO_API_ID", "LEXICON_YOUDAO_API_KEY", "LEXICON_HTTP_PROXY"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LEXICON_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        youdao_api_id="test-app-id",
        youdao_api_key="test-app-secret",
    )


@pytest.fixture
def make_record() -> Callable[..., LookupRecord]:
    def _make(query: str = "cat", **overrides) -> LookupRecord:
        data = {
            "query": query,
            "found": True,
            "translations": ["n. 猫"],
            "origin": Origin.remote(RemoteSource.YOUDAO),
        }
        data.update(overrides)
        return LookupRecord(**data)

    return _make


@pytest_asyncio.fixture
async def store(tmp_path):
    store = PersistentStore(tmp_path / "data" / "kd.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def cache() -> ProcessCache:
    return ProcessCache(shards=4)


class StubProvider:
    """RemoteProvider double returning canned records and recording calls."""

    provider_id = RemoteSource.YOUDAO

    def __init__(
        self,
        responses: Optional[Dict[str, LookupRecord]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.responses = responses or {}
        self.error = error
        self.calls: List[Tuple[str, ProviderCredentials]] = []

    async def fetch(self, query: str, credentials: ProviderCredentials) -> LookupRecord:
        self.calls.append((query, credentials))
        if self.error is not None:
            raise self.error
        if query in self.responses:
            return self.responses[query].model_copy(deep=True)
        return LookupRecord.not_found(query)


@pytest.fixture
def provider_factory() -> Callable[..., StubProvider]:
    return StubProvider


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider(
        responses={
            "cat": LookupRecord(
                query="cat",
                found=True,
                translations=["n. 猫"],
                origin=Origin.remote(RemoteSource.YOUDAO),
            )
        }
    )


@pytest.fixture
def failing_provider() -> StubProvider:
    return StubProvider(error=ProviderError("Youdao API Error 411", code="411"))


@pytest.fixture
def legacy_db_factory(tmp_path) -> Callable[..., Path]:
    """
    Build a legacy SQLite database.

    Usage:
        >>> path = legacy_db_factory({"en": [("cat", payload_bytes)]})
    """

    def _build(
        tables: Dict[str, Iterable[Tuple[str, object]]], name: str = "legacy.db"
    ) -> Path:
        path = tmp_path / name
        engine = create_engine(f"sqlite:///{path}")
        with engine.begin() as conn:
            for table, rows in tables.items():
                conn.execute(
                    text(f'CREATE TABLE "{table}" (query TEXT PRIMARY KEY, detail BLOB)')
                )
                for query, detail in rows:
                    conn.execute(
                        text(f'INSERT INTO "{table}" (query, detail) VALUES (:q, :d)'),
                        {"q": query, "d": detail},
                    )
        engine.dispose()
        return path

    return _build
