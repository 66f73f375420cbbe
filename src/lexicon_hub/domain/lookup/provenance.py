"""Provenance relabeling applied at each tier boundary.

All functions return a new record; the argument is never mutated, so a
record held by the process cache keeps its stored provenance.
"""

from lexicon_hub.domain.lookup.models import LookupRecord, Origin


def served_from_cache(record: LookupRecord) -> LookupRecord:
    """Copy of record labelled as answered by the process cache."""
    return record.model_copy(update={"origin": Origin.process_cache()}, deep=True)


def served_from_store(record: LookupRecord) -> LookupRecord:
    """
    Copy of record labelled as answered by the persistent store.

    A record originally fetched from a remote provider keeps that provider
    tag; anything else (migrated data, stray cache tags) becomes
    PersistentStore.
    """
    if record.origin.is_remote:
        return record.model_copy(deep=True)
    return record.model_copy(update={"origin": Origin.persistent_store()}, deep=True)


def stamped_for_write(record: LookupRecord, now: int) -> LookupRecord:
    """Copy of a freshly fetched record carrying its cache timestamp."""
    return record.model_copy(update={"cached_at": now}, deep=True)
