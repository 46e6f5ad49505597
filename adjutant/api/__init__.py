"""HTTP / WebSocket API layer."""
