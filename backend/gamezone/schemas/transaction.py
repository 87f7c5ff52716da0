"""
Transaction schemas
"""
from pydantic import BaseModel, field_serializer
from typing import Optional
from datetime import datetime
from decimal import Decimal

from gamezone.utils.time_utils import format_datetime_local


class TransactionResponse(BaseModel):
    """Payment or refund record"""
    id: int
    order_id: int
    transaction_type: str
    amount: Decimal
    payment_method: str
    description: Optional[str] = None
    created_at: datetime
    order_type: Optional[str] = None

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime_local(dt)
