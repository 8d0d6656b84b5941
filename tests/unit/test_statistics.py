# tests/unit/test_statistics.py
import copy
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from labbook.services.statistics_service import (
    compute_statistics,
    instrument_usage,
    total_bookings,
    user_bookings,
    weekly_usage_by_iso_week,
    weekly_usage_trailing_7_days,
)

UTC = timezone.utc


def _booking(instrument_id, user_id, start, hours, instrument_name=None, user_name=None):
    return SimpleNamespace(
        instrument_id=instrument_id,
        instrument_name=instrument_name or f"Instrument {instrument_id}",
        user_id=user_id,
        user_name=user_name or f"User {user_id}",
        start=start,
        end=start + timedelta(hours=hours),
    )


ROSTER = [
    SimpleNamespace(id="i1", name="Confocal Microscope"),
    SimpleNamespace(id="i2", name="DNA Sequencer"),
    SimpleNamespace(id="i3", name="Mass Spectrometer"),
]


def _bookings():
    return [
        _booking("i1", "u1", datetime(2024, 1, 8, 9, tzinfo=UTC), 1.5),
        _booking("i1", "u2", datetime(2024, 1, 9, 9, tzinfo=UTC), 2),
        _booking("i2", "u1", datetime(2024, 1, 10, 13, tzinfo=UTC), 0.5),
        _booking("gone", "u2", datetime(2024, 1, 16, 9, tzinfo=UTC), 1, instrument_name="Old Centrifuge"),
    ]


class TestInstrumentUsage:
    def test_roster_instruments_without_bookings_are_listed(self):
        rows = {row.instrument_id: row for row in instrument_usage(_bookings(), ROSTER)}
        assert rows["i3"].booking_count == 0
        assert rows["i3"].total_hours == 0

    def test_retired_instrument_keeps_recorded_name(self):
        rows = {row.instrument_id: row for row in instrument_usage(_bookings(), ROSTER)}
        assert rows["gone"].instrument_name == "Old Centrifuge"
        assert rows["gone"].booking_count == 1

    def test_sorted_by_hours_descending(self):
        rows = instrument_usage(_bookings(), ROSTER)
        assert [row.instrument_id for row in rows] == ["i1", "gone", "i2", "i3"]
        assert rows[0].total_hours == 3.5
        assert rows[0].booking_count == 2

    def test_hours_rounded_only_at_the_end(self):
        start = datetime(2024, 1, 8, 9, tzinfo=UTC)
        thirds = [_booking("i1", "u1", start, 1 / 3) for _ in range(3)]
        rows = instrument_usage(thirds)
        assert rows[0].total_hours == 1.0


class TestUserBookings:
    def test_per_user_totals(self):
        rows = {row.user_id: row for row in user_bookings(_bookings())}
        assert rows["u1"].booking_count == 2
        assert rows["u1"].total_hours == 2.0
        assert rows["u2"].total_hours == 3.0

    def test_busiest_first(self):
        assert [row.user_id for row in user_bookings(_bookings())] == ["u2", "u1"]


class TestWeeklyUsage:
    def test_iso_week_buckets_ascending(self):
        rows = weekly_usage_by_iso_week(_bookings(), UTC)
        assert [(row.week, row.booking_count) for row in rows] == [("2024-W02", 3), ("2024-W03", 1)]

    def test_year_boundary_uses_iso_year(self):
        bookings = [
            _booking("i1", "u1", datetime(2024, 12, 30, 9, tzinfo=UTC), 1),
            _booking("i1", "u1", datetime(2025, 1, 2, 9, tzinfo=UTC), 1),
        ]
        rows = weekly_usage_by_iso_week(bookings, UTC)
        assert [(row.week, row.booking_count) for row in rows] == [("2025-W01", 2)]

    def test_trailing_seven_days(self):
        # 2024-01-10 is a Wednesday
        rows = weekly_usage_trailing_7_days(_bookings(), date(2024, 1, 10), UTC)
        assert [row.week for row in rows] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
        assert [row.booking_count for row in rows] == [0, 0, 0, 0, 1, 1, 1]

    def test_trailing_seven_days_always_has_seven_entries(self):
        rows = weekly_usage_trailing_7_days([], date(2024, 1, 10), UTC)
        assert len(rows) == 7
        assert all(row.booking_count == 0 for row in rows)


def test_recomputing_gives_identical_results_and_leaves_input_alone():
    bookings = _bookings()
    snapshot = copy.deepcopy(bookings)

    first = compute_statistics(bookings, ROSTER, UTC)
    second = compute_statistics(bookings, ROSTER, UTC)

    assert first == second
    assert instrument_usage(bookings, ROSTER) == instrument_usage(bookings, ROSTER)
    assert user_bookings(bookings) == user_bookings(bookings)
    assert bookings == snapshot
    assert first.total_bookings == total_bookings(bookings) == 4
