"""Scoped edits and deletes over an event collection - pure, no I/O.

Every operation takes the current collection and returns a new one. Inputs
are never mutated; the caller hands the result to storage.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum

from .dates import as_date, date_key
from .errors import EventNotFoundError, InvalidEventError, NotAnOccurrenceError
from .events import DEFAULT_COLOR, Event, EventType, ExceptionEntry, Override, Recurrence
from .expander import is_occurrence

logger = logging.getLogger(__name__)


class Scope(Enum):
    """How much of a series an edit or delete touches."""

    OCCURRENCE = "occurrence"  # Just the targeted date
    FUTURE = "future"  # Targeted date and everything after it
    SERIES = "series"  # Every occurrence, past and future


def allowed_scopes(event: Event) -> tuple[Scope, ...]:
    """Scopes worth offering for an event. A one-off event only has SERIES."""
    if event.is_recurring:
        return (Scope.OCCURRENCE, Scope.FUTURE, Scope.SERIES)
    return (Scope.SERIES,)


@dataclass(frozen=True)
class EventPatch:
    """
    Requested changes to an event. None means "leave unchanged".

    Pass `recurrence=Recurrence()` (freq NONE) to drop a series' rule.
    `anchor_date` only applies to SERIES-scope edits.
    """

    title: str | None = None
    time: str | None = None
    type: EventType | None = None
    color: str | None = None
    anchor_date: date | None = None
    recurrence: Recurrence | None = None

    def cleaned(self) -> "EventPatch":
        """Trim text fields and reject a blank title."""
        title = self.title.strip() if self.title is not None else None
        if title == "":
            raise InvalidEventError("Event title cannot be blank")
        return replace(
            self,
            title=title,
            time=self.time.strip() if self.time is not None else None,
            anchor_date=as_date(self.anchor_date) if self.anchor_date is not None else None,
            recurrence=self.recurrence.normalized() if self.recurrence is not None else None,
        )

    def as_override(self) -> Override:
        return Override(title=self.title, time=self.time, type=self.type, color=self.color)

    def apply_to(self, event: Event) -> Event:
        """Overlay the display attributes onto an event."""
        return replace(
            event,
            title=self.title if self.title is not None else event.title,
            time=self.time if self.time is not None else event.time,
            type=self.type if self.type is not None else event.type,
            color=self.color if self.color is not None else event.color,
        )


def new_event_id() -> str:
    return str(uuid.uuid4())


def find_event(events: list[Event], event_id: str) -> tuple[int, Event]:
    """Locate an event by id. Raises EventNotFoundError."""
    for i, event in enumerate(events):
        if event.id == event_id:
            return i, event
    raise EventNotFoundError(event_id)


def create_event(
    events: list[Event],
    title: str,
    anchor_date: date,
    time: str = "",
    type: EventType = EventType.EVENT,
    color: str = DEFAULT_COLOR,
    recurrence: Recurrence | None = None,
    event_id: str | None = None,
) -> tuple[list[Event], Event]:
    """Append a new series. Returns the new collection and the created event."""
    title = title.strip()
    if not title:
        raise InvalidEventError("Event title cannot be blank")

    event = Event(
        id=event_id or new_event_id(),
        title=title,
        anchor_date=as_date(anchor_date),
        time=time.strip(),
        type=type,
        color=color or DEFAULT_COLOR,
        recurrence=recurrence.normalized() if recurrence is not None else Recurrence(),
    )
    logger.debug(f"Created event {event.id} on {date_key(event.anchor_date)}")
    return [*events, event], event


def _resolve_scope(event: Event, scope: Scope, anchor_date: date | None) -> Scope:
    """
    Settle which scope actually applies and check the anchor date.

    A one-off event only has one occurrence, so OCCURRENCE and FUTURE are
    handled as SERIES. For a recurring event, OCCURRENCE and FUTURE need an
    anchor date that the recurrence rule really generates.
    """
    if scope is Scope.SERIES:
        return scope

    if not event.is_recurring:
        logger.warning(
            f"Scope {scope.value!r} requested on non-recurring event {event.id}, applying to series"
        )
        return Scope.SERIES

    if anchor_date is None or not is_occurrence(event, anchor_date):
        raise NotAnOccurrenceError(event.id, anchor_date or event.anchor_date)
    return scope


def _truncate_before(event: Event, anchor_date: date) -> Event:
    """End the series on the day before anchor_date."""
    until = anchor_date - timedelta(days=1)
    return replace(event, recurrence=replace(event.recurrence, until=until))


def _upsert_exception(event: Event, entry: ExceptionEntry) -> Event:
    exceptions = dict(event.exceptions)
    exceptions[entry.date_key] = entry
    return replace(event, exceptions=exceptions)


def apply_edit(
    events: list[Event],
    event_id: str,
    anchor_date: date | None,
    scope: Scope,
    patch: EventPatch,
) -> list[Event]:
    """
    Apply an edit to one event at the requested scope.

    OCCURRENCE writes an override exception for anchor_date (replacing any
    existing exception there). FUTURE ends the original series the day
    before anchor_date and inserts a successor series starting at
    anchor_date. SERIES rewrites the event in place and keeps its
    exceptions.

    Raises:
        EventNotFoundError: event_id is not in the collection.
        NotAnOccurrenceError: anchor_date is not an occurrence of the series.
        InvalidEventError: the patch sets a blank title.
    """
    index, event = find_event(events, event_id)
    anchor = as_date(anchor_date) if anchor_date is not None else None
    scope = _resolve_scope(event, scope, anchor)
    patch = patch.cleaned()
    result = list(events)

    if scope is Scope.OCCURRENCE:
        key = date_key(anchor)
        result[index] = _upsert_exception(event, ExceptionEntry(date_key=key, override=patch.as_override()))
        logger.debug(f"Overrode occurrence {key} of event {event.id}")

    elif scope is Scope.FUTURE:
        truncated = _truncate_before(event, anchor)
        successor = replace(
            patch.apply_to(event),
            id=new_event_id(),
            anchor_date=anchor,
            recurrence=patch.recurrence if patch.recurrence is not None else event.recurrence,
            series_id=event.series_id or event.id,
            exceptions={},
        )
        result[index] = truncated
        result.insert(index + 1, successor)
        logger.debug(f"Split event {event.id} at {date_key(anchor)} into {successor.id}")

    else:
        updated = patch.apply_to(event)
        if patch.anchor_date is not None:
            updated = replace(updated, anchor_date=patch.anchor_date)
        if patch.recurrence is not None:
            updated = replace(updated, recurrence=patch.recurrence)
        result[index] = updated
        logger.debug(f"Updated series {event.id}")

    return result


def apply_delete(
    events: list[Event],
    event_id: str,
    anchor_date: date | None,
    scope: Scope,
) -> list[Event]:
    """
    Delete from one event at the requested scope.

    OCCURRENCE cancels anchor_date only. FUTURE ends the series the day
    before anchor_date. SERIES removes the event and its exceptions.

    Raises:
        EventNotFoundError: event_id is not in the collection.
        NotAnOccurrenceError: anchor_date is not an occurrence of the series.
    """
    index, event = find_event(events, event_id)
    anchor = as_date(anchor_date) if anchor_date is not None else None
    scope = _resolve_scope(event, scope, anchor)
    result = list(events)

    if scope is Scope.OCCURRENCE:
        key = date_key(anchor)
        result[index] = _upsert_exception(event, ExceptionEntry(date_key=key, cancelled=True))
        logger.debug(f"Cancelled occurrence {key} of event {event.id}")
    elif scope is Scope.FUTURE:
        result[index] = _truncate_before(event, anchor)
        logger.debug(f"Ended event {event.id} before {date_key(anchor)}")
    else:
        del result[index]
        logger.debug(f"Deleted event {event.id}")

    return result
