"""Shared utilities for LexiconHub."""

from lexicon_hub.utils.logging import bind_context, configure_logging, get_logger

__all__ = ["bind_context", "configure_logging", "get_logger"]
