"""
Appointment model
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, Time, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gamezone.db.database import Base


class Appointment(Base):
    """Appointments table"""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True, comment="Room ID")
    customer_name = Column(String(100), nullable=False, comment="Customer name")
    appointment_date = Column(Date, nullable=False, index=True, comment="Date")
    appointment_time = Column(Time, nullable=False, comment="Start time")
    duration_hours = Column(Numeric(10, 4), nullable=False, comment="Duration in hours")
    status = Column(String(20), nullable=False, default="scheduled",
                    comment="Status: scheduled, active, completed, cancelled")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="Created at")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="Updated at")

    # Relationships
    room = relationship("Room", back_populates="appointments")

    __table_args__ = (
        Index("idx_appointments_room_date", "room_id", "appointment_date"),
    )
