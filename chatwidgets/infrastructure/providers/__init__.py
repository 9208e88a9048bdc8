"""External provider implementations."""
