"""
Durable lookup store backed by SQLite.

The on-disk layout is a compatibility contract with existing databases:

    cache(query TEXT PRIMARY KEY, data BLOB NOT NULL,
          compressed_size INTEGER NOT NULL, original_size INTEGER NOT NULL,
          created_at INTEGER NOT NULL, updated_at INTEGER NOT NULL)
    idx_cache_updated ON cache(updated_at)

SQLite allows one writer at a time, so the connection is owned by a single
worker thread. Every public coroutine submits a closure to that thread and
awaits it; callers never touch the connection directly, which also keeps
put_batch and put transactions from interleaving.
"""

import asyncio
import functools
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from lexicon_hub.domain.lookup.models import LookupRecord
from lexicon_hub.exceptions import StoreError
from lexicon_hub.infrastructure.storage.codec import RecordCodec
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS cache (
        query TEXT PRIMARY KEY,
        data BLOB NOT NULL,
        compressed_size INTEGER NOT NULL,
        original_size INTEGER NOT NULL,
        created_at INTEGER NOT NULL,
        updated_at INTEGER NOT NULL
    )
"""

CREATE_INDEX_SQL = "CREATE INDEX IF NOT EXISTS idx_cache_updated ON cache(updated_at)"

UPSERT_SQL = """
    INSERT OR REPLACE INTO cache
        (query, data, compressed_size, original_size, created_at, updated_at)
    VALUES
        (:query, :data, :compressed_size, :original_size, :created_at, :updated_at)
"""


@dataclass
class StoredRow:
    """Raw row as persisted, used for diagnostics and tests."""

    query: str
    data: bytes
    compressed_size: int
    original_size: int
    created_at: int
    updated_at: int


class PersistentStore:
    """
    Key -> record table with compressed payloads.

    Use as an async context manager, or call initialize() and close()
    explicitly:

        >>> async with PersistentStore(path) as store:
        ...     await store.put("cat", record)
        ...     cached = await store.get("cat")
    """

    def __init__(
        self, path: Union[str, Path], codec: Optional[RecordCodec] = None
    ) -> None:
        self.path = Path(path)
        self.codec = codec or RecordCodec()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="persistent-store"
        )
        self._engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None
        self._closed = False

    async def __aenter__(self) -> "PersistentStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Worker-thread plumbing
    # ------------------------------------------------------------------

    async def _submit(self, fn: Callable[..., T], *args: Any) -> T:
        if self._closed:
            raise StoreError("Persistent store is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(fn, *args)
        )

    def _connection(self) -> Connection:
        # Only ever called on the worker thread
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_engine(
                f"sqlite:///{self.path}",
                connect_args={"check_same_thread": False},
            )
            self._conn = self._engine.connect()
        return self._conn

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the table and index if absent. Idempotent."""
        await self._submit(self._initialize_sync)
        logger.debug("persistent_store.initialized", path=str(self.path))

    def _initialize_sync(self) -> None:
        try:
            conn = self._connection()
            with conn.begin():
                conn.execute(text(CREATE_TABLE_SQL))
                conn.execute(text(CREATE_INDEX_SQL))
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to initialize store at {self.path}", original_error=e
            ) from e
        except OSError as e:
            raise StoreError(
                f"Cannot create store directory for {self.path}", original_error=e
            ) from e

    async def get(self, query: str) -> Optional[LookupRecord]:
        """
        Fetch and decode the record stored under query.

        Returns:
            The record, or None on miss.

        Raises:
            StoreError: On I/O failure.
            CorruptRecord: If the stored payload cannot be decoded.
        """
        data = await self._submit(self._get_payload_sync, query)
        if data is None:
            return None
        return self.codec.decode(data)

    def _get_payload_sync(self, query: str) -> Optional[bytes]:
        try:
            conn = self._connection()
            with conn.begin():
                row = conn.execute(
                    text("SELECT data FROM cache WHERE query = :query"),
                    {"query": query},
                ).first()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read '{query}'", original_error=e) from e
        return bytes(row[0]) if row is not None else None

    async def put(self, query: str, record: LookupRecord) -> None:
        """
        Upsert record under query.

        created_at and updated_at are both set to the current time on every
        call, matching INSERT OR REPLACE semantics.
        """
        row = self._prepare_row(query, record, int(time.time()))
        await self._submit(self._write_rows_sync, [row])
        logger.debug(
            "persistent_store.put",
            query=query,
            compressed_size=row["compressed_size"],
            original_size=row["original_size"],
        )

    async def put_batch(self, items: Sequence[Tuple[str, LookupRecord]]) -> int:
        """
        Write many records in a single transaction.

        Items that fail validation or encoding are skipped before the
        transaction opens. If the transaction fails, nothing is written.

        Args:
            items: (query, record) pairs.

        Returns:
            Number of rows written.

        Raises:
            StoreError: If the transaction fails to commit.
        """
        now = int(time.time())
        rows: List[Dict[str, Any]] = []
        for query, record in items:
            try:
                rows.append(self._prepare_row(query, record, now))
            except StoreError as e:
                logger.warning(
                    "persistent_store.put_batch.item_skipped",
                    query=query,
                    error=str(e),
                )

        if not rows:
            logger.debug("persistent_store.put_batch.empty_input", attempted=len(items))
            return 0

        await self._submit(self._write_rows_sync, rows)
        logger.debug(
            "persistent_store.put_batch.completed",
            attempted=len(items),
            inserted=len(rows),
        )
        return len(rows)

    async def count(self) -> int:
        """Total number of stored rows."""
        return await self._submit(self._count_sync)

    def _count_sync(self) -> int:
        try:
            conn = self._connection()
            with conn.begin():
                return int(conn.execute(text("SELECT COUNT(*) FROM cache")).scalar_one())
        except SQLAlchemyError as e:
            raise StoreError("Failed to count stored rows", original_error=e) from e

    async def get_row(self, query: str) -> Optional[StoredRow]:
        """Raw row for query, without decoding."""
        return await self._submit(self._get_row_sync, query)

    def _get_row_sync(self, query: str) -> Optional[StoredRow]:
        try:
            conn = self._connection()
            with conn.begin():
                row = conn.execute(
                    text(
                        "SELECT query, data, compressed_size, original_size, "
                        "created_at, updated_at FROM cache WHERE query = :query"
                    ),
                    {"query": query},
                ).first()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read '{query}'", original_error=e) from e
        if row is None:
            return None
        return StoredRow(
            query=row[0],
            data=bytes(row[1]),
            compressed_size=int(row[2]),
            original_size=int(row[3]),
            created_at=int(row[4]),
            updated_at=int(row[5]),
        )

    async def close(self) -> None:
        """Close the connection and stop the worker thread."""
        if self._closed:
            return
        try:
            await self._submit(self._close_sync)
        finally:
            self._closed = True
            self._executor.shutdown(wait=True)

    def _close_sync(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _prepare_row(
        self, query: str, record: LookupRecord, now: int
    ) -> Dict[str, Any]:
        if not query:
            raise StoreError("Refusing to persist a record with an empty query")
        if not record.found:
            raise StoreError(f"Refusing to persist not-found record for '{query}'")
        encoded = self.codec.encode(record)
        return {
            "query": query,
            "data": encoded.data,
            "compressed_size": encoded.compressed_size,
            "original_size": encoded.original_size,
            "created_at": now,
            "updated_at": now,
        }

    def _write_rows_sync(self, rows: List[Dict[str, Any]]) -> None:
        try:
            conn = self._connection()
            with conn.begin():
                conn.execute(text(UPSERT_SQL), rows)
        except SQLAlchemyError as e:
            raise StoreError(
                f"Transaction writing {len(rows)} row(s) failed", original_error=e
            ) from e
