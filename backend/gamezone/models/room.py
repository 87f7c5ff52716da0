"""
Room model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gamezone.db.database import Base


class Room(Base):
    """Rooms table"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True, comment="Room name")
    console_type = Column(String(20), nullable=False, default="PS5", comment="Console: PS5, Xbox")
    status = Column(String(20), nullable=False, default="available", index=True,
                    comment="Status: available, occupied, cleaning, maintenance")
    pricing_single = Column(Numeric(10, 2), nullable=False, comment="Hourly rate, single player")
    pricing_multiplayer = Column(Numeric(10, 2), nullable=False, comment="Hourly rate, multiplayer")
    # Session fields, only set while status = occupied
    current_customer_name = Column(String(100), comment="Customer of the live session")
    current_mode = Column(String(20), comment="Mode of the live session: single, multiplayer")
    current_session_start = Column(DateTime(timezone=True), comment="Live session start")
    current_session_end = Column(DateTime(timezone=True), comment="Live session end, null for open time")
    current_total_cost = Column(Numeric(10, 2), comment="Last finalized room cost")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="Created at")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="Updated at")

    # Relationships
    orders = relationship("Order", back_populates="room")
    appointments = relationship("Appointment", back_populates="room")

    __table_args__ = (
        Index("idx_rooms_name", "name"),
    )
