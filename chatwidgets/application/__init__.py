"""Application layer - agents, routing and pipeline composition."""
