"""
Cafe product schemas
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime
from decimal import Decimal

from gamezone.utils.time_utils import format_datetime_local


class CafeProductBase(BaseModel):
    """Cafe product base model"""
    name: str = Field(..., description="Name", max_length=100)
    category: str = Field("drinks", description="drinks, snacks or meals")
    price: Decimal = Field(..., ge=0, description="Unit price")
    stock: int = Field(0, ge=0, description="Units in stock")
    active: bool = Field(True, description="Available for sale")


class CafeProductCreate(CafeProductBase):
    """Create cafe product"""
    pass


class CafeProductUpdate(BaseModel):
    """Update cafe product"""
    name: Optional[str] = Field(None, description="Name", max_length=100)
    category: Optional[str] = Field(None, description="drinks, snacks or meals")
    price: Optional[Decimal] = Field(None, ge=0, description="Unit price")
    stock: Optional[int] = Field(None, ge=0, description="Units in stock")
    active: Optional[bool] = Field(None, description="Available for sale")


class CafeProductResponse(CafeProductBase):
    """Cafe product response"""
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> str:
        if dt is None:
            return ""
        return format_datetime_local(dt)


class StockAdjust(BaseModel):
    """Stock adjustment"""
    adjustment: int = Field(..., description="Units to add (negative to remove)")
