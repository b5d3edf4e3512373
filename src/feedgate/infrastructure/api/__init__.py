"""HTTP API for FeedGate: application factory, routes, schemas and dependencies."""
