"""Infrastructure layer: storage tiers and remote providers."""
