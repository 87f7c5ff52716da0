from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from gamezone.core.constants import APPOINTMENTS
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.services.scheduling import has_conflict, intervals_overlap
from gamezone.utils.time_utils import local_now

NEW_YEAR = date(2024, 1, 1)


def at(hour, minute=0):
    return datetime(2024, 1, 1, hour, minute)


class TestIntervals:
    def test_touching_intervals_do_not_overlap(self):
        assert not intervals_overlap(at(9), at(10), at(10), at(11))
        assert not intervals_overlap(at(10), at(11), at(9), at(10))

    def test_overlap_is_symmetric(self):
        pairs = [
            (at(9), at(10), at(9, 30), at(10, 30)),
            (at(9), at(12), at(10), at(11)),
            (at(9), at(10), at(11), at(12)),
        ]
        for a_start, a_end, b_start, b_end in pairs:
            assert intervals_overlap(a_start, a_end, b_start, b_end) == \
                intervals_overlap(b_start, b_end, a_start, a_end)

    def test_containment_overlaps(self):
        assert intervals_overlap(at(9), at(12), at(10), at(11))
        assert intervals_overlap(at(10), at(11), at(9), at(12))


class TestConflictChecker:
    def test_boundary_touch_and_overlap(self, scheduler, gateway, room):
        """09:00 for 1h is booked; 10:00 fits, 09:30 does not"""
        scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))

        assert not has_conflict(gateway, room["id"], NEW_YEAR, time(10, 0), Decimal("1"))
        assert has_conflict(gateway, room["id"], NEW_YEAR, time(9, 30), Decimal("1"))

    def test_other_rooms_and_dates_are_ignored(self, scheduler, gateway, room, other_room):
        scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("2"))

        assert not has_conflict(gateway, other_room["id"], NEW_YEAR, time(9, 0), Decimal("1"))
        assert not has_conflict(gateway, room["id"], date(2024, 1, 2), time(9, 0), Decimal("1"))

    def test_cancelled_appointments_free_the_slot(self, scheduler, gateway, room):
        booked = scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))
        scheduler.set_status(booked["id"], "cancelled")

        assert not has_conflict(gateway, room["id"], NEW_YEAR, time(9, 0), Decimal("1"))

    def test_excluded_appointment(self, scheduler, gateway, room):
        booked = scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))

        assert not has_conflict(gateway, room["id"], NEW_YEAR, time(9, 0), Decimal("1"), exclude_id=booked["id"])

    def test_live_sessions_are_not_consulted(self, engine, gateway, room):
        engine.start_session(room["id"], "Omar", "single")
        assert not has_conflict(gateway, room["id"], NEW_YEAR, time(9, 0), Decimal("1"))


class TestAppointmentScheduler:
    def test_double_booking_is_rejected(self, scheduler, gateway, room):
        scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))

        with pytest.raises(ConflictError):
            scheduler.create(room["id"], "Sara", NEW_YEAR, time(9, 30), Decimal("1"))
        assert len(gateway.list(APPOINTMENTS)) == 1

    def test_validation(self, scheduler, room):
        with pytest.raises(ValidationError):
            scheduler.create(room["id"], "", NEW_YEAR, time(9, 0), Decimal("1"))
        with pytest.raises(ValidationError):
            scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("0.25"))
        with pytest.raises(NotFoundError):
            scheduler.create(99, "Omar", NEW_YEAR, time(9, 0), Decimal("1"))

    def test_reschedule_ignores_itself(self, scheduler, room):
        booked = scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))

        moved = scheduler.update(booked["id"], appointment_time=time(9, 30))

        assert moved["appointment_time"] == time(9, 30)

    def test_reschedule_into_another_booking(self, scheduler, room):
        scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))
        later = scheduler.create(room["id"], "Sara", NEW_YEAR, time(11, 0), Decimal("1"))

        with pytest.raises(ConflictError):
            scheduler.update(later["id"], appointment_time=time(9, 45))

    def test_terminal_statuses_are_final(self, scheduler, room):
        booked = scheduler.create(room["id"], "Omar", NEW_YEAR, time(9, 0), Decimal("1"))
        scheduler.set_status(booked["id"], "active")
        scheduler.set_status(booked["id"], "completed")

        with pytest.raises(ConflictError):
            scheduler.set_status(booked["id"], "scheduled")
        with pytest.raises(ValidationError):
            scheduler.set_status(booked["id"], "done")


class TestReminders:
    def test_window_is_the_next_fifteen_minutes(self, scheduler, clock, room):
        local = local_now(clock.now)
        today = local.date()
        soon = scheduler.create(room["id"], "Omar", today, (local + timedelta(minutes=10)).time(), Decimal("1"))
        scheduler.create(room["id"], "Sara", today, (local + timedelta(minutes=90)).time(), Decimal("1"))
        scheduler.create(room["id"], "Past", today, (local - timedelta(hours=2)).time(), Decimal("1"))

        reminders = scheduler.upcoming_reminders()

        assert [r.appointment["id"] for r in reminders] == [soon["id"]]
        assert reminders[0].minutes_until == 10
        assert reminders[0].room_name == "Room 1"

    def test_cancelled_appointments_are_silent(self, scheduler, clock, room):
        local = local_now(clock.now)
        booked = scheduler.create(room["id"], "Omar", local.date(), (local + timedelta(minutes=5)).time(), Decimal("1"))
        scheduler.set_status(booked["id"], "cancelled")

        assert scheduler.upcoming_reminders() == []
