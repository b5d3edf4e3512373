"""Infrastructure layer for FeedGate: auth, persistence and the HTTP API."""
