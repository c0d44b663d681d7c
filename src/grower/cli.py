"""Grower CLI - calendar events for the personal dashboard."""

import json
import logging
import sys
from dataclasses import replace
from datetime import date, timedelta

import click

from .config import load_config
from .core.dates import add_months, month_start
from .core.errors import CalendarError
from .core.events import EventType, Freq, Occurrence, Recurrence
from .core.mutations import EventPatch, Scope, allowed_scopes
from .workflows import (
    add_event,
    day_occurrences,
    delete_event,
    edit_event,
    get_event,
    list_occurrences,
    upcoming_occurrences,
)

FREQ_CHOICE = click.Choice([f.value for f in Freq], case_sensitive=False)
TYPE_CHOICE = click.Choice([t.value for t in EventType])
SCOPE_CHOICE = click.Choice([s.value for s in Scope])


def _parse_date(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=name)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _recurrence_options(f):
    """Shared recurrence flags for add and edit."""
    f = click.option("--until", default=None, help="Last possible date (YYYY-MM-DD)")(f)
    f = click.option(
        "--weekday",
        "weekdays",
        type=click.IntRange(0, 6),
        multiple=True,
        help="Weekday for WEEKLY series, 0=Sunday..6=Saturday (repeatable)",
    )(f)
    f = click.option("--interval", type=int, default=None, help="Repeat every N days/weeks/months")(f)
    f = click.option("--freq", type=FREQ_CHOICE, default=None, help="Recurrence frequency")(f)
    return f


def _build_recurrence(
    base: Recurrence | None,
    freq: str | None,
    interval: int | None,
    weekdays: tuple[int, ...],
    until: str | None,
) -> Recurrence | None:
    """Recurrence from CLI flags layered on `base`. None when no flag was given."""
    if freq is None and interval is None and not weekdays and until is None:
        return None
    rule = base or Recurrence()
    if freq is not None:
        rule = replace(rule, freq=Freq(freq.upper()))
    if interval is not None:
        rule = replace(rule, interval=interval)
    if weekdays:
        rule = replace(rule, by_weekday=tuple(weekdays))
    if until is not None:
        rule = replace(rule, until=_parse_date(until, "--until") if until else None)
    return rule.normalized()


def _occurrence_dict(o: Occurrence) -> dict:
    return {
        "event_id": o.source_event_id,
        "date": o.date_key,
        "title": o.title,
        "time": o.time,
        "type": o.type.value,
        "color": o.color,
    }


def _show_occurrences(occurrences: list[Occurrence], as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared occurrence display logic."""
    if as_json:
        click.echo(json.dumps([_occurrence_dict(o) for o in occurrences], indent=2))
        return

    if not occurrences:
        click.echo(empty_msg)
        return

    current_date = None
    for occurrence in occurrences:
        if occurrence.occurrence_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {occurrence.occurrence_date.strftime('%A, %B %d')}")
            current_date = occurrence.occurrence_date

        click.echo(
            f"  {occurrence.format_time():8} {occurrence.title} [{occurrence.type.value}] ({occurrence.source_event_id})"
        )


@click.group()
@click.version_option(package_name="grower")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Grower - personal dashboard calendar."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("title")
@click.option("--date", "-d", "anchor", default=None, help="Event date (YYYY-MM-DD), defaults to today")
@click.option("--time", "-t", "time_str", default="", help="Time of day (HH:MM)")
@click.option("--type", "event_type", type=TYPE_CHOICE, default=None, help="Event type")
@click.option("--color", default=None, help="Display color token")
@_recurrence_options
def add(
    title: str,
    anchor: str | None,
    time_str: str,
    event_type: str | None,
    color: str | None,
    freq: str | None,
    interval: int | None,
    weekdays: tuple[int, ...],
    until: str | None,
):
    """Add an event, optionally recurring."""
    config = load_config()
    anchor_date = _parse_date(anchor, "--date") or date.today()
    recurrence = _build_recurrence(None, freq, interval, weekdays, until)
    try:
        event = add_event(
            config,
            title,
            anchor_date,
            time=time_str,
            type=EventType(event_type) if event_type else None,
            color=color,
            recurrence=recurrence,
        )
    except CalendarError as e:
        _fail(str(e))
    click.echo(f"✓ Added {event.title} ({event.id})")


@main.command("list")
@click.option("--start", default=None, help="First date (YYYY-MM-DD), defaults to start of this month")
@click.option("--end", default=None, help="Last date (YYYY-MM-DD), defaults to end of the start month")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(start: str | None, end: str | None, as_json: bool):
    """Show occurrences in a date range."""
    config = load_config()
    start_date = _parse_date(start, "--start") or month_start(date.today())
    end_date = _parse_date(end, "--end") or add_months(month_start(start_date), 1) - timedelta(days=1)
    occurrences = list_occurrences(config, start_date, end_date)
    _show_occurrences(occurrences, as_json, "No events in range.")


@main.command()
@click.option("--date", "-d", "target", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(target: str | None, as_json: bool):
    """Show one day's occurrences."""
    config = load_config()
    target_date = _parse_date(target, "--date") or date.today()
    _show_occurrences(day_occurrences(config, target_date), as_json, "No events on this day.")


@main.command()
@click.option("--limit", "-n", type=int, default=None, help="How many occurrences to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def upcoming(limit: int | None, as_json: bool):
    """Show the next few occurrences from today."""
    config = load_config()
    _show_occurrences(upcoming_occurrences(config, limit=limit), as_json, "No upcoming events.")


@main.command()
@click.argument("event_id")
def show(event_id: str):
    """Print an event's stored record."""
    config = load_config()
    try:
        event = get_event(config, event_id)
    except CalendarError as e:
        _fail(str(e))
    click.echo(json.dumps(event.to_record(), indent=2))


@main.command()
@click.argument("event_id")
@click.option("--on", "on_date", default=None, help="Occurrence being edited (YYYY-MM-DD)")
@click.option("--scope", type=SCOPE_CHOICE, default=Scope.SERIES.value, show_default=True)
@click.option("--title", default=None)
@click.option("--time", "-t", "time_str", default=None, help="Time of day (HH:MM)")
@click.option("--type", "event_type", type=TYPE_CHOICE, default=None)
@click.option("--color", default=None)
@click.option("--move-to", "move_to", default=None, help="New series start date (series scope only)")
@_recurrence_options
def edit(
    event_id: str,
    on_date: str | None,
    scope: str,
    title: str | None,
    time_str: str | None,
    event_type: str | None,
    color: str | None,
    move_to: str | None,
    freq: str | None,
    interval: int | None,
    weekdays: tuple[int, ...],
    until: str | None,
):
    """Edit one occurrence, this and future occurrences, or the whole series."""
    config = load_config()
    chosen = Scope(scope)
    anchor = _parse_date(on_date, "--on")
    try:
        event = get_event(config, event_id)
        _check_scope(event, chosen, anchor)
        patch = EventPatch(
            title=title,
            time=time_str,
            type=EventType(event_type) if event_type else None,
            color=color,
            anchor_date=_parse_date(move_to, "--move-to"),
            recurrence=_build_recurrence(event.recurrence, freq, interval, weekdays, until),
        )
        edit_event(config, event_id, anchor, chosen, patch)
    except CalendarError as e:
        _fail(str(e))
    click.echo(f"✓ Updated {event_id} ({chosen.value})")


@main.command()
@click.argument("event_id")
@click.option("--on", "on_date", default=None, help="Occurrence being deleted (YYYY-MM-DD)")
@click.option("--scope", type=SCOPE_CHOICE, default=Scope.SERIES.value, show_default=True)
def delete(event_id: str, on_date: str | None, scope: str):
    """Delete one occurrence, this and future occurrences, or the whole series."""
    config = load_config()
    chosen = Scope(scope)
    anchor = _parse_date(on_date, "--on")
    try:
        event = get_event(config, event_id)
        _check_scope(event, chosen, anchor)
        delete_event(config, event_id, anchor, chosen)
    except CalendarError as e:
        _fail(str(e))
    click.echo(f"✓ Deleted {event_id} ({chosen.value})")


def _check_scope(event, scope: Scope, anchor: date | None) -> None:
    """Only offer the scopes that make sense for the event."""
    if scope not in allowed_scopes(event):
        _fail(f"'{event.title}' does not repeat; only --scope series applies")
    if scope is not Scope.SERIES and anchor is None:
        _fail(f"--scope {scope.value} needs --on DATE")


if __name__ == "__main__":
    main()
