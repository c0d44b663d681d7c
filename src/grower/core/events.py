"""Calendar event data model - pure, no I/O.

An Event is a stored series definition. Occurrences are projections of a
series onto concrete dates and are never persisted.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum

from .dates import date_key, parse_date_key, parse_record_date

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "bg-primary"


class Freq(Enum):
    """Recurrence frequency."""

    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class EventType(Enum):
    """Display category of an event."""

    EVENT = "event"
    DEADLINE = "deadline"
    HABIT = "habit"
    MILESTONE = "milestone"
    WORK_STUDY = "work/study"

    @classmethod
    def parse(cls, value: object) -> "EventType":
        """Lenient lookup; unknown values fall back to EVENT."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.EVENT


def clamp_interval(value: object) -> int:
    """Interval as a positive integer; anything else becomes 1."""
    if isinstance(value, bool):
        return 1
    try:
        interval = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, interval)


@dataclass(frozen=True)
class Recurrence:
    """A recurrence rule. by_weekday uses 0=Sunday..6=Saturday."""

    freq: Freq = Freq.NONE
    interval: int = 1
    by_weekday: tuple[int, ...] = ()
    until: date | None = None

    @property
    def is_recurring(self) -> bool:
        return self.freq is not Freq.NONE

    def normalized(self) -> "Recurrence":
        """Clamp the interval and keep only distinct, valid weekday indices."""
        weekdays = sorted(
            {d for d in self.by_weekday if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6}
        )
        return replace(self, interval=clamp_interval(self.interval), by_weekday=tuple(weekdays))

    @classmethod
    def from_record(cls, data: object) -> "Recurrence":
        if not isinstance(data, dict):
            return cls()
        try:
            freq = Freq(data.get("freq", "NONE"))
        except ValueError:
            logger.warning(f"Unknown recurrence frequency {data.get('freq')!r}, treating as NONE")
            freq = Freq.NONE
        weekdays = data.get("byWeekday") or []
        if not isinstance(weekdays, list):
            weekdays = []
        until = None
        if data.get("until"):
            until = parse_date_key(data["until"])
            if until is None:
                logger.warning(f"Ignoring malformed recurrence until {data['until']!r}")
        return cls(
            freq=freq,
            interval=data.get("interval", 1),
            by_weekday=tuple(weekdays),
            until=until,
        ).normalized()

    def to_record(self) -> dict:
        record: dict = {"freq": self.freq.value, "interval": self.interval}
        if self.freq is Freq.WEEKLY and self.by_weekday:
            record["byWeekday"] = list(self.by_weekday)
        if self.until:
            record["until"] = date_key(self.until)
        return record


@dataclass(frozen=True)
class Override:
    """Partial patch of display attributes for a single occurrence."""

    title: str | None = None
    time: str | None = None
    type: EventType | None = None
    color: str | None = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.title, self.time, self.type, self.color))

    @classmethod
    def from_record(cls, data: object) -> "Override | None":
        if not isinstance(data, dict):
            return None

        def _text(key: str) -> str | None:
            value = data.get(key)
            return value if isinstance(value, str) else None

        return cls(
            title=_text("title"),
            time=_text("time"),
            type=EventType.parse(data["type"]) if data.get("type") is not None else None,
            color=_text("color"),
        )

    def to_record(self) -> dict:
        record = {}
        if self.title is not None:
            record["title"] = self.title
        if self.time is not None:
            record["time"] = self.time
        if self.type is not None:
            record["type"] = self.type.value
        if self.color is not None:
            record["color"] = self.color
        return record


@dataclass(frozen=True)
class ExceptionEntry:
    """A per-date cancellation or override layered on a series."""

    date_key: str
    cancelled: bool = False
    override: Override | None = None

    @classmethod
    def from_record(cls, data: object) -> "ExceptionEntry | None":
        if not isinstance(data, dict):
            return None
        day = parse_date_key(data.get("dateKey"))
        if day is None:
            return None
        return cls(
            date_key=date_key(day),
            cancelled=data.get("cancelled") is True,
            override=Override.from_record(data.get("override")),
        )

    def to_record(self) -> dict:
        record: dict = {"dateKey": self.date_key}
        if self.cancelled:
            record["cancelled"] = True
        if self.override is not None:
            record["override"] = self.override.to_record()
        return record


@dataclass(frozen=True)
class Occurrence:
    """One concrete appearance of a series on a date, exceptions applied."""

    source_event_id: str
    occurrence_date: date
    title: str
    time: str
    type: EventType
    color: str

    @property
    def key(self) -> tuple[str, date]:
        return (self.source_event_id, self.occurrence_date)

    @property
    def date_key(self) -> str:
        return date_key(self.occurrence_date)

    def format_time(self) -> str:
        """Format the occurrence time for display."""
        return self.time or "All day"


@dataclass(frozen=True)
class Event:
    """A stored calendar event: a series definition plus its exceptions."""

    id: str
    title: str
    anchor_date: date
    time: str = ""
    type: EventType = EventType.EVENT
    color: str = DEFAULT_COLOR
    recurrence: Recurrence = field(default_factory=Recurrence)
    series_id: str | None = None
    exceptions: dict[str, ExceptionEntry] = field(default_factory=dict)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence.is_recurring

    def exception_for(self, day: date) -> ExceptionEntry | None:
        return self.exceptions.get(date_key(day))

    def occurrence_on(self, day: date) -> Occurrence | None:
        """
        Project this series onto a single date, applying its exception.

        Does not check the recurrence rule. Returns None if cancelled.
        """
        entry = self.exception_for(day)
        if entry is not None and entry.cancelled:
            return None
        patch = entry.override if entry is not None and entry.override else Override()
        return Occurrence(
            source_event_id=self.id,
            occurrence_date=day,
            title=patch.title if patch.title is not None else self.title,
            time=patch.time if patch.time is not None else self.time,
            type=patch.type if patch.type is not None else self.type,
            color=patch.color if patch.color is not None else self.color,
        )

    @classmethod
    def from_record(cls, data: object) -> "Event | None":
        """
        Build an Event from a stored record.

        Returns None for records that cannot be used: not a dict, missing id,
        or an unparseable date. Optional fields fall back to defaults.
        """
        if not isinstance(data, dict):
            return None
        event_id = data.get("id")
        if not isinstance(event_id, str) or not event_id.strip():
            return None
        anchor = parse_record_date(data.get("date"))
        if anchor is None:
            return None

        exceptions: dict[str, ExceptionEntry] = {}
        raw_exceptions = data.get("exceptions")
        if isinstance(raw_exceptions, list):
            for raw in raw_exceptions:
                entry = ExceptionEntry.from_record(raw)
                if entry is None:
                    logger.warning(f"Skipping malformed exception on event {event_id}: {raw!r}")
                    continue
                # First entry for a date is authoritative
                exceptions.setdefault(entry.date_key, entry)

        series_id = data.get("seriesId")
        title = data.get("title")
        time_str = data.get("time")
        color = data.get("color")
        return cls(
            id=event_id,
            title=title if isinstance(title, str) else "",
            anchor_date=anchor,
            time=time_str if isinstance(time_str, str) else "",
            type=EventType.parse(data.get("type")),
            color=color if isinstance(color, str) and color else DEFAULT_COLOR,
            recurrence=Recurrence.from_record(data.get("recurrence")),
            series_id=series_id if isinstance(series_id, str) and series_id else None,
            exceptions=exceptions,
        )

    def to_record(self) -> dict:
        """Serialize to the stored record shape."""
        record: dict = {
            "id": self.id,
            "title": self.title,
            "date": datetime.combine(self.anchor_date, time()).isoformat(),
            "time": self.time,
            "type": self.type.value,
            "color": self.color,
        }
        if self.series_id:
            record["seriesId"] = self.series_id
        if self.recurrence.is_recurring or self.recurrence.until:
            record["recurrence"] = self.recurrence.to_record()
        record["exceptions"] = [e.to_record() for e in self.exceptions.values()]
        return record


def parse_events(raw: object) -> list[Event]:
    """
    Parse a stored collection into events.

    Anything that is not a list is treated as no events. Malformed records
    are skipped.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Stored calendar is not a list ({type(raw).__name__}), ignoring it")
        return []

    events = []
    for record in raw:
        event = Event.from_record(record)
        if event is None:
            logger.warning(f"Skipping malformed event record: {record!r}")
            continue
        events.append(event)
    return events


def serialize_events(events: list[Event]) -> list[dict]:
    return [e.to_record() for e in events]
