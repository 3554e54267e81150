"""Client connection handling: registry, relay sessions and WebSocket glue."""
