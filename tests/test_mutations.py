"""Tests for scoped edits and deletes."""

from datetime import date

import pytest

from grower.core.errors import EventNotFoundError, InvalidEventError, NotAnOccurrenceError
from grower.core.events import Event, EventType, ExceptionEntry, Freq, Override, Recurrence
from grower.core.expander import expand
from grower.core.mutations import (
    EventPatch,
    Scope,
    allowed_scopes,
    apply_delete,
    apply_edit,
    create_event,
)

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)


@pytest.fixture
def mondays():
    """Weekly on Mondays from 2024-01-01."""
    return Event(
        id="e1",
        title="Standup",
        anchor_date=date(2024, 1, 1),
        time="09:00",
        color="bg-leaf",
        recurrence=Recurrence(freq=Freq.WEEKLY, by_weekday=(1,)),
    )


@pytest.fixture
def one_off():
    return Event(id="once", title="Dentist", anchor_date=date(2024, 1, 10), time="10:00")


@pytest.fixture
def events(mondays, one_off):
    return [mondays, one_off]


def days(events, event_id=None):
    return [
        o.occurrence_date.day
        for o in expand(events, JAN_START, JAN_END)
        if event_id is None or o.source_event_id == event_id
    ]


class TestAllowedScopes:
    def test_recurring(self, mondays):
        assert allowed_scopes(mondays) == (Scope.OCCURRENCE, Scope.FUTURE, Scope.SERIES)

    def test_non_recurring(self, one_off):
        assert allowed_scopes(one_off) == (Scope.SERIES,)


class TestOccurrenceScope:
    def test_edit_overrides_single_date(self, events):
        result = apply_edit(events, "e1", date(2024, 1, 15), Scope.OCCURRENCE, EventPatch(title="Demo day"))

        occurrences = [o for o in expand(result, JAN_START, JAN_END) if o.source_event_id == "e1"]
        assert [o.occurrence_date.day for o in occurrences] == [1, 8, 15, 22, 29]
        assert [o.title for o in occurrences] == ["Standup", "Standup", "Demo day", "Standup", "Standup"]
        assert occurrences[2].time == "09:00"

    def test_edit_does_not_mutate_input(self, events, mondays):
        apply_edit(events, "e1", date(2024, 1, 15), Scope.OCCURRENCE, EventPatch(title="Demo day"))
        assert events[0] is mondays
        assert mondays.exceptions == {}

    def test_edit_replaces_existing_exception(self, events):
        cancelled = apply_delete(events, "e1", date(2024, 1, 15), Scope.OCCURRENCE)
        result = apply_edit(cancelled, "e1", date(2024, 1, 15), Scope.OCCURRENCE, EventPatch(time="11:00"))

        assert result[0].exceptions == {
            "2024-01-15": ExceptionEntry("2024-01-15", override=Override(time="11:00")),
        }
        assert days(result, "e1") == [1, 8, 15, 22, 29]

    def test_edit_trims_text(self, events):
        result = apply_edit(events, "e1", date(2024, 1, 8), Scope.OCCURRENCE, EventPatch(title="  Retro  "))
        assert result[0].exceptions["2024-01-08"].override.title == "Retro"

    def test_delete_cancels_single_date(self, events):
        result = apply_delete(events, "e1", date(2024, 1, 15), Scope.OCCURRENCE)

        assert days(result, "e1") == [1, 8, 22, 29]
        assert days(result, "once") == [10]
        assert result[0].recurrence == events[0].recurrence

    def test_series_untouched(self, events, mondays):
        result = apply_edit(events, "e1", date(2024, 1, 22), Scope.OCCURRENCE, EventPatch(color="bg-amber"))
        assert result[0].recurrence == mondays.recurrence
        assert result[0].title == mondays.title
        assert result[0].color == mondays.color


class TestFutureScope:
    def test_delete_truncates(self, events):
        result = apply_delete(events, "e1", date(2024, 1, 15), Scope.FUTURE)

        assert days(result, "e1") == [1, 8]
        assert result[0].recurrence.until == date(2024, 1, 14)
        assert len(result) == 2

    def test_edit_splits_series(self, events):
        result = apply_edit(
            events, "e1", date(2024, 1, 15), Scope.FUTURE, EventPatch(title="Sync", time="10:00")
        )

        assert [e.id for e in result[:1]] == ["e1"]
        assert result[2].id == "once"
        successor = result[1]
        assert successor.id not in ("e1", "once")
        assert successor.anchor_date == date(2024, 1, 15)
        assert successor.series_id == "e1"
        assert successor.exceptions == {}
        assert successor.recurrence == Recurrence(freq=Freq.WEEKLY, by_weekday=(1,))
        assert successor.color == "bg-leaf"

        assert days(result, "e1") == [1, 8]
        later = [o for o in expand(result, JAN_START, JAN_END) if o.source_event_id == successor.id]
        assert [o.occurrence_date.day for o in later] == [15, 22, 29]
        assert {(o.title, o.time) for o in later} == {("Sync", "10:00")}

    def test_edit_with_new_rule(self, events):
        patch = EventPatch(recurrence=Recurrence(freq=Freq.DAILY, interval=7))
        result = apply_edit(events, "e1", date(2024, 1, 22), Scope.FUTURE, patch)

        assert result[1].recurrence.freq is Freq.DAILY
        assert days(result, result[1].id) == [22, 29]

    def test_repeated_split_keeps_lineage(self, events):
        first = apply_edit(events, "e1", date(2024, 1, 8), Scope.FUTURE, EventPatch(title="B"))
        successor_id = first[1].id
        second = apply_edit(first, successor_id, date(2024, 1, 22), Scope.FUTURE, EventPatch(title="C"))

        assert second[2].series_id == "e1"
        assert second[1].recurrence.until == date(2024, 1, 21)
        assert [o.title for o in expand(second, JAN_START, JAN_END) if o.source_event_id != "once"] == [
            "Standup",
            "B",
            "B",
            "C",
            "C",
        ]

    def test_split_midweek_does_not_duplicate(self):
        mon_wed = Event(
            id="mw",
            title="Class",
            anchor_date=date(2024, 1, 1),
            recurrence=Recurrence(freq=Freq.WEEKLY, by_weekday=(1, 3)),
        )
        result = apply_edit([mon_wed], "mw", date(2024, 1, 17), Scope.FUTURE, EventPatch(title="Lab"))
        occurrences = expand(result, JAN_START, JAN_END)

        dates = [o.occurrence_date.day for o in occurrences]
        assert dates == [1, 3, 8, 10, 15, 17, 22, 24, 29, 31]
        assert [o.title for o in occurrences if o.occurrence_date.day >= 17] == ["Lab"] * 5

    def test_earlier_occurrences_unaffected(self, events):
        before = [o for o in expand(events, JAN_START, date(2024, 1, 14)) if o.source_event_id == "e1"]
        result = apply_edit(events, "e1", date(2024, 1, 15), Scope.FUTURE, EventPatch(title="Sync"))
        after = [o for o in expand(result, JAN_START, date(2024, 1, 14)) if o.source_event_id == "e1"]
        assert before == after


class TestSeriesScope:
    def test_edit_in_place_keeps_exceptions(self, events):
        cancelled = apply_delete(events, "e1", date(2024, 1, 8), Scope.OCCURRENCE)
        result = apply_edit(cancelled, "e1", None, Scope.SERIES, EventPatch(title="Daily standup", type=EventType.HABIT))

        assert result[0].id == "e1"
        assert result[0].title == "Daily standup"
        assert result[0].type is EventType.HABIT
        assert "2024-01-08" in result[0].exceptions
        assert days(result, "e1") == [1, 15, 22, 29]

    def test_edit_rule_and_anchor(self, events):
        patch = EventPatch(anchor_date=date(2024, 1, 2), recurrence=Recurrence(freq=Freq.WEEKLY, by_weekday=(2,)))
        result = apply_edit(events, "e1", None, Scope.SERIES, patch)
        assert days(result, "e1") == [2, 9, 16, 23, 30]

    def test_edit_can_clear_rule(self, events):
        result = apply_edit(events, "e1", None, Scope.SERIES, EventPatch(recurrence=Recurrence()))
        assert not result[0].is_recurring
        assert days(result, "e1") == [1]

    def test_delete_removes_event(self, events):
        result = apply_delete(events, "e1", date(2024, 1, 15), Scope.SERIES)
        assert [e.id for e in result] == ["once"]
        assert len(events) == 2


class TestNonRecurringScopes:
    @pytest.mark.parametrize("scope", [Scope.OCCURRENCE, Scope.FUTURE])
    def test_delete_acts_on_series(self, events, scope):
        result = apply_delete(events, "once", date(2024, 1, 10), scope)
        assert [e.id for e in result] == ["e1"]

    @pytest.mark.parametrize("scope", [Scope.OCCURRENCE, Scope.FUTURE])
    def test_edit_acts_on_series(self, events, scope):
        result = apply_edit(events, "once", date(2024, 1, 10), scope, EventPatch(title="Orthodontist"))

        assert len(result) == 2
        assert result[1].title == "Orthodontist"
        assert result[1].exceptions == {}


class TestValidation:
    @pytest.mark.parametrize("scope", [Scope.OCCURRENCE, Scope.FUTURE])
    def test_edit_rejects_non_occurrence(self, events, scope):
        with pytest.raises(NotAnOccurrenceError):
            apply_edit(events, "e1", date(2024, 1, 16), scope, EventPatch(title="X"))

    @pytest.mark.parametrize("scope", [Scope.OCCURRENCE, Scope.FUTURE])
    def test_delete_rejects_non_occurrence(self, events, scope):
        with pytest.raises(NotAnOccurrenceError):
            apply_delete(events, "e1", date(2023, 12, 25), scope)

    def test_rejects_date_after_until(self, events):
        truncated = apply_delete(events, "e1", date(2024, 1, 15), Scope.FUTURE)
        with pytest.raises(NotAnOccurrenceError):
            apply_delete(truncated, "e1", date(2024, 1, 22), Scope.OCCURRENCE)

    def test_requires_anchor_for_occurrence(self, events):
        with pytest.raises(NotAnOccurrenceError):
            apply_delete(events, "e1", None, Scope.OCCURRENCE)

    def test_cancelled_date_still_editable(self, events):
        cancelled = apply_delete(events, "e1", date(2024, 1, 15), Scope.OCCURRENCE)
        result = apply_edit(cancelled, "e1", date(2024, 1, 15), Scope.OCCURRENCE, EventPatch(title="Back"))
        assert days(result, "e1") == [1, 8, 15, 22, 29]

    def test_unknown_event(self, events):
        with pytest.raises(EventNotFoundError):
            apply_delete(events, "missing", None, Scope.SERIES)
        with pytest.raises(EventNotFoundError):
            apply_edit(events, "missing", None, Scope.SERIES, EventPatch())

    def test_blank_title(self, events):
        with pytest.raises(InvalidEventError):
            apply_edit(events, "e1", None, Scope.SERIES, EventPatch(title="   "))


class TestCreateEvent:
    def test_appends_new_series(self, events):
        result, event = create_event(
            events,
            "  Book club ",
            date(2024, 1, 4),
            time="19:00",
            recurrence=Recurrence(freq=Freq.MONTHLY, interval=0),
        )

        assert result[-1] is event
        assert len(events) == 2
        assert event.title == "Book club"
        assert event.id not in ("e1", "once")
        assert event.series_id is None
        assert event.exceptions == {}
        assert event.recurrence.interval == 1
        assert days(result, event.id) == [4]

    def test_explicit_id(self):
        _, event = create_event([], "Walk", date(2024, 1, 1), event_id="fixed")
        assert event.id == "fixed"
        assert event.recurrence == Recurrence()

    def test_fresh_ids(self):
        events, a = create_event([], "A", date(2024, 1, 1))
        events, b = create_event(events, "B", date(2024, 1, 1))
        assert a.id != b.id

    def test_blank_title(self):
        with pytest.raises(InvalidEventError):
            create_event([], " ", date(2024, 1, 1))
