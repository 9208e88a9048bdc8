"""Agent pipeline and triage routing for AI chat widgets."""

__version__ = "0.1.0"
