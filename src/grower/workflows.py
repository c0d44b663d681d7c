"""Workflow layer between the CLI and the calendar core.

Each mutating workflow loads the collection from the store, applies one
pure core operation, saves the result and returns what changed. Read
workflows load and expand without saving.
"""

import logging
from datetime import date

from .adapters.json_event_store import JsonEventStore
from .config import Config
from .core.events import Event, EventType, Occurrence, Recurrence
from .core.expander import expand, occurrences_on, upcoming
from .core.mutations import EventPatch, Scope, apply_delete, apply_edit, create_event, find_event
from .ports.event_store import EventStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> EventStore:
    """Resolve the event store from config."""
    return JsonEventStore(config.events_path)


def get_event(config: Config, event_id: str) -> Event:
    """Look up one stored event. Raises EventNotFoundError."""
    _, event = find_event(get_store(config).load(), event_id)
    return event


def add_event(
    config: Config,
    title: str,
    anchor_date: date,
    time: str = "",
    type: EventType | None = None,
    color: str | None = None,
    recurrence: Recurrence | None = None,
) -> Event:
    """Create and persist a new event, using configured defaults for type and color."""
    store = get_store(config)
    events, event = create_event(
        store.load(),
        title,
        anchor_date,
        time=time,
        type=type or EventType.parse(config.default_type),
        color=color or config.default_color,
        recurrence=recurrence,
    )
    store.save(events)
    logger.info(f"Added event {event.id} ({event.title})")
    return event


def edit_event(
    config: Config,
    event_id: str,
    anchor_date: date | None,
    scope: Scope,
    patch: EventPatch,
) -> list[Event]:
    """Apply a scoped edit and persist. Returns the new collection."""
    store = get_store(config)
    events = apply_edit(store.load(), event_id, anchor_date, scope, patch)
    store.save(events)
    logger.info(f"Edited event {event_id} ({scope.value})")
    return events


def delete_event(
    config: Config,
    event_id: str,
    anchor_date: date | None,
    scope: Scope,
) -> list[Event]:
    """Apply a scoped delete and persist. Returns the new collection."""
    store = get_store(config)
    events = apply_delete(store.load(), event_id, anchor_date, scope)
    store.save(events)
    logger.info(f"Deleted event {event_id} ({scope.value})")
    return events


def list_occurrences(config: Config, start: date, end: date) -> list[Occurrence]:
    return expand(get_store(config).load(), start, end)


def day_occurrences(config: Config, target_date: date) -> list[Occurrence]:
    return occurrences_on(get_store(config).load(), target_date)


def upcoming_occurrences(
    config: Config,
    today: date | None = None,
    limit: int | None = None,
) -> list[Occurrence]:
    """Next occurrences from today, bounded by the configured horizon."""
    return upcoming(
        get_store(config).load(),
        today or date.today(),
        limit=config.upcoming_limit if limit is None else limit,
        horizon_days=config.upcoming_days,
    )
