"""Legacy dictionary migration and archive acquisition."""

from lexicon_hub.migration.legacy import (
    FullMigrationReport,
    LegacyMigrationConfig,
    TableMigrationReport,
    TableStatus,
    migrate_legacy_database,
)
from lexicon_hub.migration.legacy_models import LegacyRecord, convert_legacy

__all__ = [
    "FullMigrationReport",
    "LegacyMigrationConfig",
    "LegacyRecord",
    "TableMigrationReport",
    "TableStatus",
    "convert_legacy",
    "migrate_legacy_database",
]
