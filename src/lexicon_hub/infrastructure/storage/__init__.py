"""Storage tiers: record codec, persistent store and process cache."""

from lexicon_hub.infrastructure.storage.codec import EncodedRecord, RecordCodec
from lexicon_hub.infrastructure.storage.persistent_store import (
    PersistentStore,
    StoredRow,
)
from lexicon_hub.infrastructure.storage.process_cache import ProcessCache

__all__ = [
    "EncodedRecord",
    "PersistentStore",
    "ProcessCache",
    "RecordCodec",
    "StoredRow",
]
