"""Core infrastructure: logging."""
