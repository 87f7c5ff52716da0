"""
Order model
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gamezone.db.database import Base


class Order(Base):
    """Orders table"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(100), nullable=False, comment="Customer name")
    order_type = Column(String(20), nullable=False, default="room_reservation",
                        comment="Type: room_reservation, cafe_order, combo")
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True, index=True, comment="Room ID, null for cafe orders")
    total_amount = Column(Numeric(10, 2), nullable=False, default=0, comment="Sum of the order items")
    status = Column(String(20), nullable=False, default="active", index=True,
                    comment="Status: active, paused, completed, cancelled")
    start_time = Column(DateTime(timezone=True), comment="Start of the current room segment")
    end_time = Column(DateTime(timezone=True), comment="Committed end, or completion time")
    mode = Column(String(20), comment="Mode: single, multiplayer")
    is_open_time = Column(Boolean, nullable=False, default=False, comment="Metered session")
    duration_hours = Column(Numeric(10, 4), comment="Booked hours, null for open time")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="Created at")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="Updated at")

    # Relationships
    room = relationship("Room", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")
    transactions = relationship("Transaction", back_populates="order")

    __table_args__ = (
        Index("idx_orders_room_id", "room_id"),
        Index("idx_orders_status", "status"),
    )
