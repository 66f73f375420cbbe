"""Command-line interface for LexiconHub."""
