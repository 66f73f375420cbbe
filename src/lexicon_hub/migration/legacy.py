"""
Legacy dictionary migration.

Copies every row of the legacy per-language tables (en, ch) into the
persistent store. Each legacy payload is zlib-compressed JSON, or plain
JSON in older archives. Rows that cannot be decoded are counted and
skipped; a batch whose transaction fails is counted as a whole and the
table continues with the next batch.

Usage:
    >>> async with PersistentStore(path) as store:
    ...     report = await migrate_legacy_database(source_db, store)
    >>> report.to_dict()
"""

import asyncio
import zlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from lexicon_hub.domain.lookup.models import LookupRecord
from lexicon_hub.domain.lookup.normalizer import normalize_query
from lexicon_hub.exceptions import (
    MigrationBatchError,
    MigrationError,
    MigrationRowError,
    StoreError,
)
from lexicon_hub.infrastructure.storage.persistent_store import PersistentStore
from lexicon_hub.migration.legacy_models import LegacyRecord, convert_legacy
from lexicon_hub.migration.progress import MigrationProgress
from lexicon_hub.utils.logging import bind_context, get_logger

logger = get_logger(__name__)

LegacyRow = Tuple[Any, Any]


class TableStatus(str, Enum):
    MIGRATED = "migrated"
    MISSING = "missing"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class LegacyMigrationConfig:
    batch_size: int = 100
    tables: Tuple[str, ...] = ("en", "ch")
    progress: bool = True
    decode_chunk_size: int = 1000
    max_error_samples: int = 10


@dataclass
class TableMigrationReport:
    table: str
    status: TableStatus = TableStatus.MIGRATED
    total_rows: int = 0
    inserted: int = 0
    errors: int = 0
    plain_payloads: int = 0
    error_samples: List[Dict[str, Any]] = field(default_factory=list)
    max_error_samples: int = 10

    def add_error(self, reason: str, count: int = 1, query: Optional[str] = None) -> None:
        self.errors += count
        if len(self.error_samples) < self.max_error_samples:
            self.error_samples.append({"query": query, "reason": reason, "count": count})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "status": self.status.value,
            "total_rows": self.total_rows,
            "inserted": self.inserted,
            "errors": self.errors,
            "plain_payloads": self.plain_payloads,
            "error_samples": list(self.error_samples),
        }


@dataclass
class FullMigrationReport:
    source_path: str = ""
    reports: List[TableMigrationReport] = field(default_factory=list)

    total_rows: int = 0
    total_inserted: int = 0
    total_errors: int = 0

    def add_report(self, report: TableMigrationReport) -> None:
        self.reports.append(report)
        self.total_rows += report.total_rows
        self.total_inserted += report.inserted
        self.total_errors += report.errors

    @property
    def cancelled(self) -> bool:
        return any(r.status is TableStatus.CANCELLED for r in self.reports)

    @property
    def all_failed(self) -> bool:
        """True when some table failed and none migrated; missing tables are not failures."""
        statuses = [r.status for r in self.reports]
        return TableStatus.FAILED in statuses and TableStatus.MIGRATED not in statuses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "total_rows": self.total_rows,
            "total_inserted": self.total_inserted,
            "total_errors": self.total_errors,
            "all_failed": self.all_failed,
            "tables": [r.to_dict() for r in self.reports],
        }


@dataclass
class DecodedRow:
    query: Optional[str]
    record: Optional[LookupRecord] = None
    plain: bool = False
    error: Optional[MigrationRowError] = None


# ----------------------------------------------------------------------
# Row decoding (runs in the blocking pool)
# ----------------------------------------------------------------------


def decode_legacy_payload(payload: Union[bytes, bytearray, memoryview, str]) -> Tuple[bytes, bool]:
    """
    Undo the legacy zlib layer.

    Returns:
        (json_bytes, plain) where plain is True when the payload was not
        zlib-compressed and the raw bytes are returned unchanged.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    raw = bytes(payload)
    try:
        return zlib.decompress(raw), False
    except zlib.error:
        return raw, True


def decode_row(query: Any, payload: Any) -> DecodedRow:
    """Decode, parse and convert one legacy row. Never raises."""
    raw_query = query if isinstance(query, str) else None
    try:
        key = normalize_query(raw_query or "")
    except ValueError:
        return DecodedRow(
            query=raw_query,
            error=MigrationRowError("Row has an empty or non-text query", query=raw_query),
        )

    if payload is None:
        return DecodedRow(
            query=key, error=MigrationRowError("Row has no payload", query=key)
        )
    if not isinstance(payload, (bytes, bytearray, memoryview, str)):
        return DecodedRow(
            query=key,
            error=MigrationRowError("Row payload is not text or blob", query=key),
        )

    data, plain = decode_legacy_payload(payload)
    try:
        # A plain payload is only accepted when it parses as a JSON object
        legacy = LegacyRecord.model_validate_json(data)
    except ValidationError as e:
        reason = "unparseable plain payload" if plain else "unparseable payload"
        return DecodedRow(
            query=key,
            plain=plain,
            error=MigrationRowError(
                f"{reason} ({e.error_count()} errors)", query=key, original_error=e
            ),
        )

    return DecodedRow(query=key, record=convert_legacy(legacy), plain=plain)


def _decode_chunk(rows: Sequence[LegacyRow]) -> List[DecodedRow]:
    return [decode_row(query, payload) for query, payload in rows]


def _iter_chunks(rows: Sequence[LegacyRow], size: int) -> Iterator[Sequence[LegacyRow]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


# ----------------------------------------------------------------------
# Source access (runs in the blocking pool)
# ----------------------------------------------------------------------


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _table_exists(engine: Engine, table: str) -> bool:
    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": table},
        ).first()
    return row is not None


def _read_table(engine: Engine, table: str) -> Optional[List[LegacyRow]]:
    """All (query, detail) rows of table, or None if the table is absent."""
    if not _table_exists(engine, table):
        return None
    with engine.connect() as conn:
        result = conn.execute(
            text(f"SELECT query, detail FROM {_quote_identifier(table)}")
        )
        return [(row[0], row[1]) for row in result]


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------


async def _flush(
    store: PersistentStore,
    batch: List[Tuple[str, LookupRecord]],
    report: TableMigrationReport,
    progress: MigrationProgress,
) -> None:
    try:
        inserted = await store.put_batch(batch)
    except StoreError as e:
        batch_error = MigrationBatchError(
            f"Batch of {len(batch)} rows failed to commit: {e.message}",
            batch_size=len(batch),
            original_error=e,
        )
        logger.warning(
            "legacy_migration.batch_failed", table=report.table, **batch_error.to_dict()
        )
        report.add_error(batch_error.message, count=len(batch))
        progress.update(errors=len(batch))
        return

    # Items rejected by the store before the transaction opened
    rejected = len(batch) - inserted
    report.inserted += inserted
    if rejected:
        report.add_error("rejected by store", count=rejected)
    progress.update(inserted=inserted, errors=rejected)


async def migrate_table(
    engine: Engine,
    table: str,
    store: PersistentStore,
    config: LegacyMigrationConfig,
    cancel_event: Optional[asyncio.Event] = None,
) -> TableMigrationReport:
    """Migrate a single legacy table into store."""
    log = bind_context(operation="legacy_migration", table=table)
    report = TableMigrationReport(table=table, max_error_samples=config.max_error_samples)

    try:
        rows = await asyncio.to_thread(_read_table, engine, table)
    except SQLAlchemyError as e:
        report.status = TableStatus.FAILED
        report.add_error(f"could not read table: {e}", count=0)
        log.error("legacy_migration.table.read_failed", error=str(e))
        return report

    if rows is None:
        report.status = TableStatus.MISSING
        log.info("legacy_migration.table.missing")
        return report

    report.total_rows = len(rows)
    log.info("legacy_migration.table.started", total_rows=report.total_rows)

    progress = MigrationProgress(table, report.total_rows, enabled=config.progress)
    progress.start()
    batch: List[Tuple[str, LookupRecord]] = []
    cancelled = False
    try:
        for chunk in _iter_chunks(rows, config.decode_chunk_size):
            decoded = await asyncio.to_thread(_decode_chunk, chunk)
            progress.update(n=len(chunk))

            for item in decoded:
                if item.error is not None:
                    report.add_error(item.error.message, query=item.query)
                    progress.update(errors=1)
                    log.debug(
                        "legacy_migration.row_skipped",
                        query=item.query,
                        reason=item.error.message,
                    )
                    continue
                if item.plain:
                    report.plain_payloads += 1
                batch.append((item.query, item.record))

                if len(batch) >= config.batch_size:
                    await _flush(store, batch, report, progress)
                    batch = []
                    if cancel_event is not None and cancel_event.is_set():
                        cancelled = True
                        break
            if cancelled:
                break

        if batch and not cancelled:
            await _flush(store, batch, report, progress)
    finally:
        progress.finish()

    if cancelled:
        report.status = TableStatus.CANCELLED
        log.warning("legacy_migration.table.cancelled", inserted=report.inserted)
    elif report.total_rows > 0 and report.inserted == 0:
        report.status = TableStatus.FAILED
    else:
        report.status = TableStatus.MIGRATED

    if report.plain_payloads:
        log.warning(
            "legacy_migration.table.plain_payloads",
            plain_payloads=report.plain_payloads,
        )
    log.info("legacy_migration.table.completed", **report.to_dict())
    return report


async def migrate_legacy_database(
    source_path: Union[str, Path],
    store: PersistentStore,
    config: Optional[LegacyMigrationConfig] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> FullMigrationReport:
    """
    Migrate every configured legacy table from source_path into store.

    Tables are processed in order. A missing table is skipped; a cancelled
    run finishes the current batch and does not start further tables.

    Raises:
        MigrationError: If source_path does not exist.
    """
    config = config or LegacyMigrationConfig()
    source = Path(source_path)
    if not source.is_file():
        raise MigrationError(f"Legacy database not found: {source}")

    full_report = FullMigrationReport(source_path=str(source))
    engine = create_engine(f"sqlite:///{source}")
    try:
        for table in config.tables:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("legacy_migration.cancelled_before_table", table=table)
                break
            report = await migrate_table(engine, table, store, config, cancel_event)
            full_report.add_report(report)
            if report.status is TableStatus.CANCELLED:
                break
    finally:
        engine.dispose()

    logger.info(
        "legacy_migration.completed",
        source_path=str(source),
        total_rows=full_report.total_rows,
        total_inserted=full_report.total_inserted,
        total_errors=full_report.total_errors,
        all_failed=full_report.all_failed,
    )
    return full_report
