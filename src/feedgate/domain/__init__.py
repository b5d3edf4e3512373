"""Domain layer for FeedGate: entities and services."""
