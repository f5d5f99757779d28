"""Object storage HTTP API."""
