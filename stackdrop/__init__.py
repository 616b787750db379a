"""Stack-matching reflex game: session engine plus an HTTP/WebSocket host."""
