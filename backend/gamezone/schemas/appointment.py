"""
Appointment schemas
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime, date, time
from decimal import Decimal

from gamezone.utils.time_utils import format_datetime_local


class AppointmentBase(BaseModel):
    """Appointment base model"""
    room_id: int = Field(..., description="Room ID")
    customer_name: str = Field(..., description="Customer name", max_length=100)
    appointment_date: date = Field(..., description="Local date, YYYY-MM-DD")
    appointment_time: time = Field(..., description="Local start time, HH:MM")
    duration_hours: Decimal = Field(..., gt=0, description="Booked hours")


class AppointmentCreate(AppointmentBase):
    """Create appointment"""
    pass


class AppointmentUpdate(BaseModel):
    """Update appointment"""
    room_id: Optional[int] = Field(None, description="Room ID")
    customer_name: Optional[str] = Field(None, description="Customer name", max_length=100)
    appointment_date: Optional[date] = Field(None, description="Local date")
    appointment_time: Optional[time] = Field(None, description="Local start time")
    duration_hours: Optional[Decimal] = Field(None, gt=0, description="Booked hours")


class AppointmentStatusUpdate(BaseModel):
    """Change appointment status"""
    status: str = Field(..., description="active, completed or cancelled")


class AppointmentResponse(AppointmentBase):
    """Appointment response"""
    id: int
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime_local(dt)


class ConflictCheckRequest(BaseModel):
    """Would this booking overlap another one?"""
    room_id: int = Field(..., description="Room ID")
    appointment_date: date = Field(..., description="Local date")
    appointment_time: time = Field(..., description="Local start time")
    duration_hours: Decimal = Field(..., gt=0, description="Booked hours")
    exclude_id: Optional[int] = Field(None, description="Appointment being edited")


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicting_ids: list = []


class ReminderResponse(BaseModel):
    """Appointment starting soon"""
    appointment: AppointmentResponse
    room_name: str
    starts_at: datetime
    minutes_until: int
