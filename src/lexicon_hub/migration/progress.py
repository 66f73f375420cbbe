"""
Progress reporting for legacy table migration.

Wraps a tqdm bar showing processed rows with the running inserted and
error counts, and logs a completion summary.
"""

import time
from typing import Optional

from tqdm import tqdm

from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationProgress:
    """
    Progress reporter for one legacy table.

    Usage:
        >>> progress = MigrationProgress(table="en", total_rows=1000, enabled=True)
        >>> progress.start()
        >>> progress.update(n=100, inserted=98, errors=2)
        >>> progress.finish()
    """

    def __init__(self, table: str, total_rows: int, enabled: bool = True) -> None:
        self.table = table
        self.total_rows = total_rows
        self.enabled = enabled

        self.processed = 0
        self.inserted = 0
        self.errors = 0

        self.start_time: Optional[float] = None
        self._pbar: Optional[tqdm] = None

    def start(self) -> None:
        self.start_time = time.time()
        if self.enabled:
            self._pbar = tqdm(
                total=self.total_rows,
                desc=f"Migrating {self.table}",
                unit="rec",
                ncols=100,
            )

    def update(self, n: int = 0, inserted: int = 0, errors: int = 0) -> None:
        """
        Record progress.

        Args:
            n: Rows decoded since the last update.
            inserted: Rows written since the last update.
            errors: Rows failed since the last update.
        """
        self.processed += n
        self.inserted += inserted
        self.errors += errors

        if self._pbar:
            if n:
                self._pbar.update(n)
            self._pbar.set_postfix_str(
                f"inserted: {self.inserted} | errors: {self.errors}"
            )

    def finish(self) -> None:
        if self._pbar:
            self._pbar.close()
            self._pbar = None

        elapsed = time.time() - self.start_time if self.start_time else 0.0
        logger.info(
            "legacy_migration.table.progress_finished",
            table=self.table,
            total_rows=self.total_rows,
            processed_rows=self.processed,
            inserted=self.inserted,
            errors=self.errors,
            elapsed_seconds=f"{elapsed:.2f}",
        )
