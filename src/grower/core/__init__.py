"""Functional core - pure calendar logic with no I/O."""

from .errors import CalendarError, EventNotFoundError, InvalidEventError, NotAnOccurrenceError
from .events import (
    Event,
    EventType,
    ExceptionEntry,
    Freq,
    Occurrence,
    Override,
    Recurrence,
    parse_events,
    serialize_events,
)
from .expander import expand, is_occurrence, occurrences_on, upcoming
from .mutations import EventPatch, Scope, allowed_scopes, apply_delete, apply_edit, create_event

__all__ = [
    # Model
    "Event",
    "EventType",
    "ExceptionEntry",
    "Freq",
    "Occurrence",
    "Override",
    "Recurrence",
    "parse_events",
    "serialize_events",
    # Expansion
    "expand",
    "is_occurrence",
    "occurrences_on",
    "upcoming",
    # Mutation
    "EventPatch",
    "Scope",
    "allowed_scopes",
    "apply_delete",
    "apply_edit",
    "create_event",
    # Errors
    "CalendarError",
    "EventNotFoundError",
    "InvalidEventError",
    "NotAnOccurrenceError",
]
