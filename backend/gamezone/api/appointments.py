"""
Appointment API
"""
from dataclasses import asdict
from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from gamezone.api.deps import get_gateway
from gamezone.config import APPOINTMENT_REMINDER_MINUTES
from gamezone.core.constants import APPOINTMENTS
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentStatusUpdate, AppointmentResponse,
    ConflictCheckRequest, ConflictCheckResponse, ReminderResponse,
)
from gamezone.services.scheduling import AppointmentScheduler, find_conflicts

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("", response_model=List[AppointmentResponse])
def get_appointments(
    appointment_date: Optional[date] = None,
    room_id: Optional[int] = None,
    status: Optional[str] = None,
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """List appointments in booking order"""
    filters = {}
    if appointment_date:
        filters["appointment_date"] = appointment_date
    if room_id is not None:
        filters["room_id"] = room_id
    if status:
        filters["status"] = status
    appointments = gateway.list(APPOINTMENTS, filters)
    return sorted(appointments, key=lambda a: (a["appointment_date"], a["appointment_time"]))


@router.get("/reminders", response_model=List[ReminderResponse])
def get_reminders(
    within_minutes: int = Query(APPOINTMENT_REMINDER_MINUTES, ge=1, le=24 * 60, description="Look-ahead window"),
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """Scheduled appointments starting soon"""
    return [asdict(r) for r in AppointmentScheduler(gateway).upcoming_reminders(within_minutes)]


@router.post("/check-conflict", response_model=ConflictCheckResponse)
def check_conflict(request: ConflictCheckRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Would the booking overlap an existing one?"""
    conflicts = find_conflicts(
        gateway, request.room_id, request.appointment_date, request.appointment_time,
        request.duration_hours, request.exclude_id,
    )
    return {"has_conflict": bool(conflicts), "conflicting_ids": [a["id"] for a in conflicts]}


@router.post("", response_model=AppointmentResponse)
def create_appointment(request: AppointmentCreate, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Book a room"""
    return AppointmentScheduler(gateway).create(**request.model_dump())


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(appointment_id: int, request: AppointmentUpdate,
                       gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Change or reschedule a booking"""
    return AppointmentScheduler(gateway).update(appointment_id, **request.model_dump(exclude_unset=True))


@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_status(appointment_id: int, request: AppointmentStatusUpdate,
                  gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Mark a booking active, completed or cancelled"""
    return AppointmentScheduler(gateway).set_status(appointment_id, request.status)


@router.delete("/{appointment_id}")
def delete_appointment(appointment_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Delete a booking"""
    AppointmentScheduler(gateway).delete(appointment_id)
    return {"message": "Appointment deleted"}
