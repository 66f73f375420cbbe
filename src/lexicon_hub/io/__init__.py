"""I/O adapters for external systems."""
