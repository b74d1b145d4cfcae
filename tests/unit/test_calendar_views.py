"""
Unit tests for calendar views over appointment snapshots.
"""

from datetime import date, datetime

import pytest

from clinic_scheduler.services import calendar_views
from clinic_scheduler.shared_types.scheduling import AppointmentStatus
from tests.utils import TZ, at, make_appointment

S = AppointmentStatus


class TestWeekBucket:
    """Test Monday-start week grouping."""

    def test_monday_appointment_in_first_bucket(self):
        """Test anchor Wednesday 2025-01-15 groups Monday 2025-01-13 first."""
        monday = make_appointment("a1", at(2025, 1, 13, 10))
        next_monday = make_appointment("a2", at(2025, 1, 20, 10))

        bucket = calendar_views.week_bucket([monday, next_monday], date(2025, 1, 15), TZ)

        assert bucket.week_start == date(2025, 1, 13)
        assert bucket.week_end == date(2025, 1, 19)
        assert [d.day for d in bucket.days] == [date(2025, 1, d) for d in range(13, 20)]
        assert bucket.for_day(date(2025, 1, 13)) == [monday]
        assert bucket.for_day(date(2025, 1, 20)) == []
        assert bucket.all_appointments() == [monday]

    def test_days_sorted_ascending(self):
        later = make_appointment("a1", at(2025, 1, 14, 16))
        earlier = make_appointment("a2", at(2025, 1, 14, 8))

        bucket = calendar_views.week_bucket([later, earlier], at(2025, 1, 14, 12), TZ)

        assert bucket.for_day(date(2025, 1, 14)) == [earlier, later]

    def test_late_evening_bucketed_on_local_day(self):
        """Test that 23:30 local on Sunday stays in Sunday's bucket."""
        late = make_appointment("a1", at(2025, 1, 19, 23, 30), duration_minutes=30)

        bucket = calendar_views.week_bucket([late], date(2025, 1, 13), TZ)

        assert bucket.for_day(date(2025, 1, 19)) == [late]

    def test_includes_every_status(self):
        cancelled = make_appointment("a1", at(2025, 1, 15, 9), status=S.CANCELLED)

        bucket = calendar_views.week_bucket([cancelled], date(2025, 1, 15), TZ)

        assert bucket.all_appointments() == [cancelled]

    def test_empty_snapshot(self):
        bucket = calendar_views.week_bucket([], date(2025, 1, 15), TZ)

        assert len(bucket.days) == 7
        assert bucket.all_appointments() == []


class TestDailyStats:
    """Test per-day counts."""

    def test_counts_by_status(self):
        appointments = [
            make_appointment("a1", at(2025, 1, 10, 9), status=S.CONFIRMED),
            make_appointment("a2", at(2025, 1, 10, 11), status=S.CONFIRMED),
            make_appointment("a3", at(2025, 1, 10, 15)),
        ]

        assert calendar_views.daily_stats(appointments, date(2025, 1, 10), TZ) == {
            "total": 3, "confirmed": 2, "completed": 0
        }

    def test_other_days_ignored(self):
        appointments = [
            make_appointment("a1", at(2025, 1, 10, 9), status=S.COMPLETED),
            make_appointment("a2", at(2025, 1, 11, 9), status=S.COMPLETED),
        ]

        stats = calendar_views.daily_stats(appointments, at(2025, 1, 10, 20), TZ)

        assert stats == {"total": 1, "confirmed": 0, "completed": 1}

    def test_empty_day(self):
        assert calendar_views.daily_stats([], date(2025, 1, 10), TZ) == {
            "total": 0, "confirmed": 0, "completed": 0
        }


class TestListViews:
    """Test day, range, client and list views."""

    def test_appointments_on_day_sorted(self):
        second = make_appointment("a1", at(2025, 1, 10, 12))
        first = make_appointment("a2", at(2025, 1, 10, 9))
        other = make_appointment("a3", at(2025, 1, 11, 9))

        assert calendar_views.appointments_on_day([second, other, first], date(2025, 1, 10), TZ) == [first, second]

    def test_appointments_in_range_inclusive(self):
        appointments = [make_appointment(f"a{d}", at(2025, 1, d, 9)) for d in range(8, 14)]

        result = calendar_views.appointments_in_range(appointments, date(2025, 1, 9), date(2025, 1, 11), TZ)

        assert [a.id for a in result] == ["a9", "a10", "a11"]

    def test_appointments_in_range_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            calendar_views.appointments_in_range([], date(2025, 1, 11), date(2025, 1, 9), TZ)

    def test_appointments_for_client_newest_first(self):
        old = make_appointment("a1", at(2025, 1, 3, 9), client_id="c1")
        new = make_appointment("a2", at(2025, 1, 20, 9), client_id="c1")
        other = make_appointment("a3", at(2025, 1, 10, 9), client_id="c2")

        assert calendar_views.appointments_for_client([old, other, new], "c1") == [new, old]

    def test_list_view_descending(self):
        a = make_appointment("a1", at(2025, 1, 3, 9))
        b = make_appointment("a2", at(2025, 1, 20, 9))
        c = make_appointment("a3", at(2025, 1, 10, 9))

        assert calendar_views.list_view([a, b, c]) == [b, c, a]


class TestDashboardCounts:
    """Test upcoming, pending and weekly counts."""

    def test_upcoming_skips_past_and_cancelled(self):
        now = at(2025, 1, 10, 12)
        past = make_appointment("past", at(2025, 1, 10, 9))
        cancelled = make_appointment("cancelled", at(2025, 1, 11, 9), status=S.CANCELLED)
        soon = make_appointment("soon", at(2025, 1, 10, 12))
        later = make_appointment("later", at(2025, 1, 12, 9), status=S.CONFIRMED)

        result = calendar_views.upcoming_appointments([later, past, cancelled, soon], now)

        assert [a.id for a in result] == ["soon", "later"]

    def test_upcoming_limited_to_five(self):
        now = at(2025, 1, 1, 0)
        appointments = [make_appointment(f"a{d}", at(2025, 1, d, 9)) for d in range(2, 12)]

        result = calendar_views.upcoming_appointments(appointments, now)

        assert [a.id for a in result] == ["a2", "a3", "a4", "a5", "a6"]

    def test_upcoming_custom_limit(self):
        appointments = [make_appointment(f"a{d}", at(2025, 1, d, 9)) for d in range(2, 5)]

        assert calendar_views.upcoming_appointments(appointments, at(2025, 1, 1), limit=0) == []
        assert len(calendar_views.upcoming_appointments(appointments, at(2025, 1, 1), limit=2)) == 2

    def test_pending_count(self):
        appointments = [
            make_appointment("a1"),
            make_appointment("a2", status=S.CONFIRMED),
            make_appointment("a3"),
        ]

        assert calendar_views.pending_count(appointments) == 2

    def test_week_count(self):
        appointments = [
            make_appointment("a1", at(2025, 1, 13, 9)),
            make_appointment("a2", at(2025, 1, 19, 23, 30), duration_minutes=15),
            make_appointment("a3", at(2025, 1, 20, 9)),
        ]

        assert calendar_views.week_count(appointments, date(2025, 1, 15), TZ) == 2

    def test_upcoming_accepts_naive_now(self):
        """Test that a naive 'now' is read as clinic-local time."""
        earlier = make_appointment("earlier", at(2025, 1, 10, 9))
        later = make_appointment("later", at(2025, 1, 10, 13))

        result = calendar_views.upcoming_appointments([later, earlier], datetime(2025, 1, 10, 12), tz=TZ)

        assert [a.id for a in result] == ["later"]
