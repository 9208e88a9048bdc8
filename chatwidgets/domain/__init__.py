"""Domain layer - entities, protocols, errors and outcomes."""
