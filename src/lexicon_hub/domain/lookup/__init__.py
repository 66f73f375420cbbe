"""Lookup domain: records, provenance and query normalization."""

from lexicon_hub.domain.lookup.models import (
    LookupRecord,
    Origin,
    OriginKind,
    RemoteSource,
    RichEntry,
)
from lexicon_hub.domain.lookup.normalizer import normalize_query
from lexicon_hub.domain.lookup.provenance import (
    served_from_cache,
    served_from_store,
    stamped_for_write,
)

__all__ = [
    "LookupRecord",
    "Origin",
    "OriginKind",
    "RemoteSource",
    "RichEntry",
    "normalize_query",
    "served_from_cache",
    "served_from_store",
    "stamped_for_write",
]
