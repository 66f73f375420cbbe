"""Domain layer for LexiconHub."""
