"""Occurrence expansion - pure, no I/O.

Turns a stored series definition into the concrete occurrences that fall
inside an inclusive date window. Nothing is cached; callers expand afresh
for every window they display.
"""

from collections.abc import Iterable, Iterator
from datetime import date, datetime

from .dates import add_months, as_date, month_start, months_between, weekday_index
from .events import Event, Freq, Occurrence


def rule_dates(event: Event, window_start: date, window_end: date) -> Iterator[date]:
    """
    Yield the dates generated by the event's recurrence rule in the window.

    Exceptions are not applied. Dates before the series anchor, outside the
    window, or after `until` are never yielded. Dates come out in order.
    """
    start = as_date(window_start)
    end = as_date(window_end)
    anchor = event.anchor_date
    rule = event.recurrence.normalized()

    if rule.until is not None:
        end = min(end, rule.until)
    # Nothing before the anchor is ever an occurrence
    start = max(start, anchor)
    if start > end:
        return

    match rule.freq:
        case Freq.NONE:
            if start == anchor:
                yield anchor
        case Freq.DAILY:
            yield from _daily(anchor, rule.interval, start, end)
        case Freq.WEEKLY:
            weekdays = rule.by_weekday or (weekday_index(anchor),)
            yield from _weekly(anchor, rule.interval, weekdays, start, end)
        case Freq.MONTHLY:
            yield from _monthly(anchor, rule.interval, start, end)


def _week_start_ordinal(d: date) -> int:
    """Ordinal of the Sunday starting d's week (may precede date.min)."""
    return d.toordinal() - weekday_index(d)


def _daily(anchor: date, interval: int, start: date, end: date) -> Iterator[date]:
    # Work in day ordinals so stepping past date.max never builds a date
    base = anchor.toordinal()
    last = end.toordinal()
    # Round the day offset up to the next multiple of interval
    ordinal = base + -(-(start.toordinal() - base) // interval) * interval
    while ordinal <= last:
        yield date.fromordinal(ordinal)
        ordinal += interval


def _weekly(
    anchor: date,
    interval: int,
    weekdays: tuple[int, ...],
    start: date,
    end: date,
) -> Iterator[date]:
    anchor_week = _week_start_ordinal(anchor)
    week = max(_week_start_ordinal(start), anchor_week)
    first = start.toordinal()
    last = end.toordinal()

    # Only weeks a whole number of intervals after the anchor's week are eligible
    offset = ((week - anchor_week) // 7) % interval
    if offset:
        week += (interval - offset) * 7

    while week <= last:
        for wd in weekdays:
            ordinal = week + wd
            if first <= ordinal <= last:
                yield date.fromordinal(ordinal)
        week += interval * 7


def _monthly(anchor: date, interval: int, start: date, end: date) -> Iterator[date]:
    cursor = max(month_start(start), month_start(anchor))

    months = months_between(anchor, cursor)
    offset = months % interval
    if offset:
        months += interval - offset

    # Never ask for a month past end's month; later years may not exist
    last_month = months_between(anchor, end)
    while months <= last_month:
        # add_months clamps day 29-31 to the end of shorter months
        candidate = add_months(anchor, months)
        if candidate > end:
            return
        if candidate >= start:
            yield candidate
        months += interval


def is_occurrence(event: Event, day: date) -> bool:
    """Whether the event's recurrence rule generates `day` (cancellations ignored)."""
    day = as_date(day)
    return any(True for _ in rule_dates(event, day, day))


def expand_event(event: Event, window_start: date, window_end: date) -> list[Occurrence]:
    """Occurrences of a single series in the inclusive window, in date order."""
    occurrences = []
    for day in rule_dates(event, window_start, window_end):
        occurrence = event.occurrence_on(day)
        if occurrence is not None:
            occurrences.append(occurrence)
    return occurrences


def sort_occurrences(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Order by date, then time (untimed first), then title."""
    return sorted(occurrences, key=lambda o: (o.occurrence_date, o.time, o.title))


def expand(
    events: Event | Iterable[Event],
    window_start: date | datetime,
    window_end: date | datetime,
) -> list[Occurrence]:
    """
    Expand one event or a whole collection over an inclusive date window.

    Pure function - never mutates its inputs. A single event gives its
    occurrences in date order; a collection gives all occurrences merged and
    sorted by date, time and title.
    """
    if isinstance(events, Event):
        return expand_event(events, window_start, window_end)

    occurrences = []
    for event in events:
        occurrences.extend(expand_event(event, window_start, window_end))
    return sort_occurrences(occurrences)


def occurrences_on(events: Iterable[Event], day: date) -> list[Occurrence]:
    """All occurrences on a single date."""
    return expand(events, day, day)


def upcoming(
    events: Iterable[Event],
    today: date,
    limit: int = 3,
    horizon_days: int = 60,
) -> list[Occurrence]:
    """The next `limit` occurrences from today onward, within the horizon."""
    today = as_date(today)
    # Horizon is capped at date.max
    last = min(today.toordinal() + max(0, horizon_days), date.max.toordinal())
    window_end = date.fromordinal(last)
    return expand(events, today, window_end)[: max(0, limit)]
