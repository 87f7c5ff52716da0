"""
Order schemas
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal

from gamezone.schemas.room import RoomResponse
from gamezone.schemas.transaction import TransactionResponse
from gamezone.utils.time_utils import format_datetime_local


class OrderItemResponse(BaseModel):
    """Order line"""
    id: int
    order_id: int
    item_type: str
    product_id: Optional[int] = None
    item_name: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime_local(dt)


class OrderResponse(BaseModel):
    """Order"""
    id: int
    customer_name: str
    order_type: str
    room_id: Optional[int] = None
    total_amount: Decimal
    status: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    mode: Optional[str] = None
    is_open_time: bool
    duration_hours: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('start_time', 'end_time', 'created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class OrderDetailResponse(OrderResponse):
    """Order with its lines and transactions"""
    items: List[OrderItemResponse] = []
    transactions: List[TransactionResponse] = []


class SessionResponse(BaseModel):
    """Result of a session or payment operation"""
    order: OrderResponse
    room: Optional[RoomResponse] = None
    items: List[OrderItemResponse] = []
    transaction: Optional[TransactionResponse] = None
    room_cost: Optional[Decimal] = None
    cafe_cost: Optional[Decimal] = None


class CafeOrderRequest(BaseModel):
    """Sell cafe products as a new order"""
    customer_name: str = Field(..., description="Customer name", max_length=100)
    items: Dict[int, int] = Field(..., description="Quantities by product ID")
    payment_method: str = Field("cash", description="cash, card or transfer")
    pay_now: bool = Field(True, description="False keeps the order open as a tab")


class CafeItemsRequest(BaseModel):
    """Add cafe products to an open order"""
    items: Dict[int, int] = Field(..., description="Quantities by product ID")


class CafeOrderResponse(BaseModel):
    """Order with the lines just added"""
    order: OrderResponse
    items: List[OrderItemResponse]
    transaction: Optional[TransactionResponse] = None


class UpdateItemRequest(BaseModel):
    """Change a cafe line's quantity"""
    quantity: int = Field(..., gt=0, description="New quantity")


class ReactivateRequest(BaseModel):
    """Resume a paused order"""
    duration_hours: Optional[Decimal] = Field(None, description="Booked hours, omit for open time")


class ExtendTimeRequest(BaseModel):
    """Move a fixed order's end time"""
    add_hours: Decimal = Field(..., description="Hours to add (negative to shorten)")


class PaymentRequest(BaseModel):
    """Pay an order"""
    payment_method: str = Field("cash", description="cash, card or transfer")


class RefundRequest(BaseModel):
    """Refund part or all of a completed order"""
    amount: Decimal = Field(..., gt=0, description="Refund amount")
    payment_method: str = Field("cash", description="cash, card or transfer")
    reason: Optional[str] = Field(None, description="Reason", max_length=500)
