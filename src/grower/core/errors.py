"""Errors raised when the calendar core is called with inputs it cannot honor."""

from datetime import date


class CalendarError(Exception):
    """Base class for calendar misuse errors."""


class EventNotFoundError(CalendarError):
    """No event with the given id exists in the collection."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"No event with id {event_id!r}")


class NotAnOccurrenceError(CalendarError):
    """The targeted date is not generated by the event's recurrence rule."""

    def __init__(self, event_id: str, day: date):
        self.event_id = event_id
        self.day = day
        super().__init__(f"{day.isoformat()} is not an occurrence of event {event_id!r}")


class InvalidEventError(CalendarError):
    """Event attributes that cannot be stored, e.g. a blank title."""
