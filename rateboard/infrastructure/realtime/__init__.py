"""Real-time push transport (WebSocket)."""
