"""Adapters - I/O implementations of ports."""

from .json_event_store import JsonEventStore

__all__ = [
    "JsonEventStore",
]
