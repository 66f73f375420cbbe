"""Application services: tiered lookup and dictionary update."""

from lexicon_hub.application.lookup import LookupService, LookupStatistics

__all__ = ["LookupService", "LookupStatistics"]
