"""
Offline dictionary update.

Downloads the dictionary archive (unless already present), extracts it,
migrates the legacy database into the persistent store and removes the
downloaded files afterwards.
"""

import asyncio
from pathlib import Path
from typing import Optional

from lexicon_hub.exceptions import MigrationError
from lexicon_hub.migration.archive import (
    choose_archive_url,
    download_archive,
    extract_archive,
    find_legacy_database,
)
from lexicon_hub.migration.legacy import (
    FullMigrationReport,
    LegacyMigrationConfig,
    migrate_legacy_database,
)
from lexicon_hub.state import AppState
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


def migration_config_from_state(state: AppState, progress: bool = True) -> LegacyMigrationConfig:
    settings = state.settings
    return LegacyMigrationConfig(
        batch_size=settings.migration_batch_size,
        tables=tuple(settings.legacy_tables),
        progress=progress,
    )


async def update_dictionary(
    state: AppState,
    cancel_event: Optional[asyncio.Event] = None,
    progress: bool = True,
) -> FullMigrationReport:
    """
    Fetch the offline dictionary and migrate it into the store.

    Raises:
        MigrationError: If the download or extraction fails or the archive
            holds no legacy database.
    """
    settings = state.settings
    data_dir = settings.data_dir
    zip_path = settings.archive_path

    if zip_path.exists():
        logger.info("dictionary_update.archive_reused", zip_path=str(zip_path))
    else:
        url = await asyncio.to_thread(choose_archive_url, state.http_session, settings)
        await asyncio.to_thread(
            download_archive,
            url,
            zip_path,
            state.http_session,
            progress=progress,
        )

    await extract_archive(zip_path, data_dir)
    source_db = find_legacy_database(data_dir, exclude=[settings.database_path])
    if source_db is None:
        raise MigrationError(f"No legacy database found in {zip_path.name}")

    logger.info("dictionary_update.migrating", source_db=str(source_db))
    report = await migrate_legacy_database(
        source_db,
        state.store,
        migration_config_from_state(state, progress=progress),
        cancel_event,
    )

    _cleanup(zip_path, source_db, data_dir)
    logger.info("dictionary_update.completed", **report.to_dict())
    return report


def _cleanup(zip_path: Path, source_db: Path, data_dir: Path) -> None:
    if zip_path.exists():
        zip_path.unlink()
        logger.debug("dictionary_update.removed", path=str(zip_path))
    if source_db.parent.resolve() == data_dir.resolve() and source_db.exists():
        source_db.unlink()
        logger.debug("dictionary_update.removed", path=str(source_db))
