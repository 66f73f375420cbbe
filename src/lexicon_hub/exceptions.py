"""Exception hierarchy for lookup, storage and migration failures.

Every error carries an optional stage marker so a failed lookup can tell
the user which tier produced the failure.
"""

from enum import Enum
from typing import Any, Dict, Optional


class LookupStage(str, Enum):
    """Enum for lookup and migration pipeline stages."""

    CACHE = "cache"
    STORE = "store"
    REMOTE = "remote"
    WRITE_THROUGH = "write_through"
    MIGRATION = "migration"


class LexiconError(Exception):
    """Base exception with stage context."""

    default_stage: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.stage = stage or self.default_stage
        self.original_error = original_error
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        data: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "stage": self.stage,
            "message": self.message,
        }
        if self.original_error is not None:
            data["original_error_type"] = type(self.original_error).__name__
            data["original_error_message"] = str(self.original_error)
        return data


class ConfigurationError(LexiconError):
    """Raised when provider credentials are missing or invalid."""

    default_stage = LookupStage.REMOTE.value


class ProviderError(LexiconError):
    """Raised when the remote call fails or returns an API-level error code."""

    default_stage = LookupStage.REMOTE.value

    def __init__(self, message: str, *, code: Optional[str] = None, **kwargs: Any):
        self.code = code
        super().__init__(message, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["code"] = self.code
        return data


class StoreError(LexiconError):
    """Raised on I/O or codec failure against the durable store."""

    default_stage = LookupStage.STORE.value


class CorruptRecord(StoreError):
    """Raised when a single stored value cannot be decoded."""

    pass


class MigrationError(LexiconError):
    """Raised when a legacy migration cannot start."""

    default_stage = LookupStage.MIGRATION.value


class MigrationRowError(MigrationError):
    """A single legacy row could not be parsed or converted."""

    def __init__(self, message: str, *, query: Optional[str] = None, **kwargs: Any):
        self.query = query
        super().__init__(message, **kwargs)


class MigrationBatchError(MigrationError):
    """A migration batch transaction failed to commit."""

    def __init__(self, message: str, *, batch_size: int = 0, **kwargs: Any):
        self.batch_size = batch_size
        super().__init__(message, **kwargs)
