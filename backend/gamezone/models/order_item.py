"""
Order item model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gamezone.db.database import Base


class OrderItem(Base):
    """Order items table"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True, comment="Order ID")
    item_type = Column(String(20), nullable=False, comment="Type: room_time, cafe_product")
    product_id = Column(Integer, ForeignKey("cafe_products.id"), nullable=True, comment="Cafe product ID")
    item_name = Column(String(200), nullable=False, comment="Display name")
    quantity = Column(Numeric(10, 4), nullable=False, default=0, comment="Hours or units, 0 for open time placeholders")
    unit_price = Column(Numeric(10, 2), nullable=False, comment="Unit price")
    total_price = Column(Numeric(10, 2), nullable=False, comment="Total price")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="Created at")

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("CafeProduct")

    __table_args__ = (
        Index("idx_order_items_order_id", "order_id"),
    )
