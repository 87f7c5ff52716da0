"""
Appointment scheduling

Appointments are local wall-clock bookings of [start, start + duration) on
one room and date. Two bookings on the same room and date conflict when
their intervals overlap; touching ends do not. Live room sessions are not
consulted here.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from gamezone.config import APPOINTMENT_REMINDER_MINUTES
from gamezone.core.constants import APPOINTMENTS, ROOMS
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.services.pricing import check_customer_name, check_duration
from gamezone.services.unit_of_work import UnitOfWork
from gamezone.utils.logging_utils import get_logger
from gamezone.utils.money import to_hours
from gamezone.utils.time_utils import MS_PER_HOUR, local_now, utcnow

logger = get_logger("appointments")

# Allowed status changes; completed and cancelled are final
STATUS_TRANSITIONS = {
    "scheduled": ("active", "completed", "cancelled"),
    "active": ("completed", "cancelled"),
    "completed": (),
    "cancelled": (),
}


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap"""
    return start_a < end_b and end_a > start_b


def appointment_window(day: date, start: time, duration_hours) -> Tuple[datetime, datetime]:
    begin = datetime.combine(day, start)
    ms = int((Decimal(str(duration_hours)) * MS_PER_HOUR).to_integral_value())
    return begin, begin + timedelta(milliseconds=ms)


def find_conflicts(
    store: PersistenceGateway,
    room_id: int,
    day: date,
    start: time,
    duration_hours,
    exclude_id: Optional[int] = None,
) -> List[Row]:
    """Non-cancelled appointments of the room on that date that overlap the candidate"""
    candidate_start, candidate_end = appointment_window(day, start, duration_hours)
    conflicts = []
    for existing in store.list(APPOINTMENTS, {"room_id": room_id, "appointment_date": day}):
        if existing["status"] == "cancelled":
            continue
        if exclude_id is not None and existing["id"] == exclude_id:
            continue
        existing_start, existing_end = appointment_window(
            existing["appointment_date"], existing["appointment_time"], existing["duration_hours"]
        )
        if intervals_overlap(candidate_start, candidate_end, existing_start, existing_end):
            conflicts.append(existing)
    return conflicts


def has_conflict(store, room_id, day, start, duration_hours, exclude_id=None) -> bool:
    return bool(find_conflicts(store, room_id, day, start, duration_hours, exclude_id))


@dataclass
class Reminder:
    appointment: Row
    room_name: str
    starts_at: datetime
    minutes_until: int


class AppointmentScheduler:
    """Create, move and close appointments without double-booking a room"""

    def __init__(self, gateway: PersistenceGateway, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self.clock = clock or utcnow

    def _get(self, appointment_id: int) -> Row:
        appointment = self.gateway.get(APPOINTMENTS, appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def _get_room(self, room_id: int) -> Row:
        room = self.gateway.get(ROOMS, room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def _check_free(self, room: Row, day: date, start: time, duration: Decimal,
                    exclude_id: Optional[int] = None) -> None:
        conflicts = find_conflicts(self.gateway, room["id"], day, start, duration, exclude_id)
        if conflicts:
            other = conflicts[0]
            raise ConflictError(
                f"{room['name']} is already booked by {other['customer_name']} at "
                f"{other['appointment_time'].strftime('%H:%M')} on {day.isoformat()}"
            )

    def create(self, room_id: int, customer_name: str, appointment_date: date,
               appointment_time: time, duration_hours) -> Row:
        customer_name = check_customer_name(customer_name)
        duration = check_duration(duration_hours)
        if duration is None:
            raise ValidationError("Appointments need a duration")
        room = self._get_room(room_id)
        self._check_free(room, appointment_date, appointment_time, duration)

        with UnitOfWork(self.gateway, "create appointment") as uow:
            appointment = uow.create(APPOINTMENTS, {
                "room_id": room_id,
                "customer_name": customer_name,
                "appointment_date": appointment_date,
                "appointment_time": appointment_time,
                "duration_hours": to_hours(duration),
                "status": "scheduled",
            })
        logger.info("Appointment %s: %s booked %s on %s %s for %sh", appointment["id"], customer_name,
                    room["name"], appointment_date, appointment_time.strftime("%H:%M"), duration)
        return appointment

    def update(self, appointment_id: int, room_id: Optional[int] = None, customer_name: Optional[str] = None,
               appointment_date: Optional[date] = None, appointment_time: Optional[time] = None,
               duration_hours=None) -> Row:
        """Change any booking detail; the new slot is re-checked, ignoring the booking itself"""
        appointment = self._get(appointment_id)
        if appointment["status"] not in ("scheduled", "active"):
            raise ConflictError(f"Appointment {appointment_id} is {appointment['status']} and cannot be changed")

        fields = {}
        if customer_name is not None:
            fields["customer_name"] = check_customer_name(customer_name)
        if duration_hours is not None:
            fields["duration_hours"] = to_hours(check_duration(duration_hours))
        if room_id is not None:
            fields["room_id"] = room_id
        if appointment_date is not None:
            fields["appointment_date"] = appointment_date
        if appointment_time is not None:
            fields["appointment_time"] = appointment_time
        if not fields:
            return appointment

        merged = dict(appointment, **fields)
        room = self._get_room(merged["room_id"])
        self._check_free(room, merged["appointment_date"], merged["appointment_time"],
                         merged["duration_hours"], exclude_id=appointment_id)

        with UnitOfWork(self.gateway, "update appointment") as uow:
            appointment = uow.update(APPOINTMENTS, appointment_id, fields)
        logger.info("Appointment %s updated: %s", appointment_id, ", ".join(sorted(fields)))
        return appointment

    def set_status(self, appointment_id: int, status: str) -> Row:
        appointment = self._get(appointment_id)
        if status not in STATUS_TRANSITIONS:
            raise ValidationError(f"Status must be one of {', '.join(STATUS_TRANSITIONS)}")
        current = appointment["status"]
        if status == current:
            return appointment
        if status not in STATUS_TRANSITIONS[current]:
            raise ConflictError(f"Appointment {appointment_id} cannot go from {current} to {status}")

        with UnitOfWork(self.gateway, "appointment status") as uow:
            appointment = uow.update(APPOINTMENTS, appointment_id, {"status": status})
        logger.info("Appointment %s: %s -> %s", appointment_id, current, status)
        return appointment

    def delete(self, appointment_id: int) -> None:
        self._get(appointment_id)
        with UnitOfWork(self.gateway, "delete appointment") as uow:
            uow.delete(APPOINTMENTS, appointment_id)
        logger.info("Appointment %s deleted", appointment_id)

    def upcoming_reminders(self, within_minutes: int = APPOINTMENT_REMINDER_MINUTES) -> List[Reminder]:
        """Scheduled appointments starting in (now, now + within_minutes], soonest first"""
        now = local_now(self.clock()).replace(tzinfo=None)
        horizon = now + timedelta(minutes=within_minutes)
        days = {now.date(), horizon.date()}

        reminders = []
        for appointment in self.gateway.list(APPOINTMENTS, {"status": "scheduled"}):
            if appointment["appointment_date"] not in days:
                continue
            starts_at = datetime.combine(appointment["appointment_date"], appointment["appointment_time"])
            if now < starts_at <= horizon:
                room = self.gateway.get(ROOMS, appointment["room_id"])
                reminders.append(Reminder(
                    appointment=appointment,
                    room_name=room["name"] if room else f"Room {appointment['room_id']}",
                    starts_at=starts_at,
                    minutes_until=int((starts_at - now).total_seconds() // 60),
                ))
        reminders.sort(key=lambda r: r.starts_at)
        return reminders
