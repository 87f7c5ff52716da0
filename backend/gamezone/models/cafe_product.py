"""
Cafe product model
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Index
from sqlalchemy.sql import func
from gamezone.db.database import Base


class CafeProduct(Base):
    """Cafe products table"""
    __tablename__ = "cafe_products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True, comment="Name")
    category = Column(String(20), nullable=False, default="drinks", comment="Category: drinks, snacks, meals")
    price = Column(Numeric(10, 2), nullable=False, comment="Unit price")
    stock = Column(Integer, nullable=False, default=0, comment="Stock, only edited by staff")
    active = Column(Boolean, nullable=False, default=True, comment="Available for sale")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="Created at")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="Updated at")

    __table_args__ = (
        Index("idx_cafe_products_name", "name"),
    )
