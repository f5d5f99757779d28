"""Core building blocks shared across the service: settings and exceptions."""
