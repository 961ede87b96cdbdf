"""External service integrations (git)."""
