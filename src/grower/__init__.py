"""Grower - recurring calendar events for a personal dashboard."""

__version__ = "0.1.0"
