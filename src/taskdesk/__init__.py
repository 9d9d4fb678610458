"""taskdesk: session-aware client for a remote task service."""

__version__ = "0.1.0"
