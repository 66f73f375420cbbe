"""
LexiconHub - dictionary lookup with a tiered cache and offline store.

Lookups consult a process-local cache, then a durable SQLite store of
compressed records, and only then a remote translation provider. The
store can be bulk-populated from the legacy offline dictionary archive.
"""

__version__ = "0.1.0"
