"""Infrastructure layer - telemetry, storage, providers and HTTP middleware."""
