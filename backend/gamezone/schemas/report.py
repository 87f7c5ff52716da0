"""
Report schemas
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal

from gamezone.schemas.transaction import TransactionResponse
from gamezone.utils.time_utils import format_datetime_local


class ReportResponse(BaseModel):
    """Revenue summary"""
    period: Optional[str] = Field(None, description="Named period, if one was used")
    start: datetime
    end: datetime
    currency: str
    total_revenue: Decimal
    payment_count: int
    revenue_by_order_type: Dict[str, Decimal]
    revenue_by_payment_method: Dict[str, Decimal]
    revenue_by_day: Dict[str, Decimal]
    refund_total: Decimal
    net_revenue: Decimal
    transactions: List[TransactionResponse] = []

    @field_serializer('start', 'end')
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime_local(dt)
