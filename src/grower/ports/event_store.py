"""Event store interface."""

from typing import Protocol

from grower.core.events import Event


class EventStore(Protocol):
    """Interface for loading and saving the calendar event collection."""

    def load(self) -> list[Event]:
        """Load all stored events. Returns an empty list if nothing usable is stored."""
        ...

    def save(self, events: list[Event]) -> None:
        """Replace the stored collection."""
        ...
