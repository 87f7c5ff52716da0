"""
Room schemas
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from gamezone.utils.time_utils import format_datetime_local


class RoomBase(BaseModel):
    """Room base model"""
    name: str = Field(..., description="Room name", max_length=100)
    console_type: str = Field("PS5", description="Console: PS5 or Xbox")


class RoomCreate(RoomBase):
    """Create room; prices default to the console's standard rates"""
    pricing_single: Optional[Decimal] = Field(None, ge=0, description="Hourly rate, single")
    pricing_multiplayer: Optional[Decimal] = Field(None, ge=0, description="Hourly rate, multiplayer")


class RoomUpdate(BaseModel):
    """Update room"""
    name: Optional[str] = Field(None, description="Room name", max_length=100)
    console_type: Optional[str] = Field(None, description="Console: PS5 or Xbox")
    status: Optional[str] = Field(None, description="available, cleaning or maintenance")
    pricing_single: Optional[Decimal] = Field(None, ge=0, description="Hourly rate, single")
    pricing_multiplayer: Optional[Decimal] = Field(None, ge=0, description="Hourly rate, multiplayer")


class RoomResponse(RoomBase):
    """Room response"""
    id: int
    status: str
    pricing_single: Decimal
    pricing_multiplayer: Decimal
    current_customer_name: Optional[str] = None
    current_mode: Optional[str] = None
    current_session_start: Optional[datetime] = None
    current_session_end: Optional[datetime] = None
    current_total_cost: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('current_session_start', 'current_session_end', 'created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class StartSessionRequest(BaseModel):
    """Start a room session"""
    customer_name: str = Field(..., description="Customer name", max_length=100)
    mode: str = Field("single", description="single or multiplayer")
    duration_hours: Optional[Decimal] = Field(None, description="Booked hours, omit for open time")
    order_id: Optional[int] = Field(None, description="Open cafe order to attach the room to")


class StopSessionRequest(BaseModel):
    """Stop a room session"""
    force_complete: bool = Field(False, description="Complete and pay a fixed session instead of pausing it")
    payment_method: str = Field("cash", description="cash, card or transfer")


class AdjustTimeRequest(BaseModel):
    """Move a fixed session's end time"""
    delta_hours: Decimal = Field(..., description="Hours to add (negative to shorten)")


class LiveCostResponse(BaseModel):
    """Accrued cost of a running session"""
    room_id: int
    order_id: int
    is_open_time: bool
    elapsed_hours: Decimal
    room_cost: Decimal
    cafe_cost: Decimal
    total: Decimal
    ends_at: Optional[datetime] = None
    overdue: bool

    @field_serializer('ends_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class ExpiredRoomResponse(BaseModel):
    """Rooms whose booked time has run out"""
    rooms: List[RoomResponse]
    count: int
