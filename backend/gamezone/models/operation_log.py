"""
Operation log model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.sql import func
from gamezone.db.database import Base


class OperationLog(Base):
    """Operation logs table"""
    __tablename__ = "operation_logs"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, default="cashier", comment="Terminal user")
    action = Column(String(100), nullable=False, index=True, comment="Action, e.g. Start session")
    module = Column(String(50), nullable=False, index=True, comment="Module, e.g. Rooms")
    method = Column(String(10), nullable=False, comment="HTTP method")
    path = Column(String(500), nullable=False, comment="Request path")
    ip_address = Column(String(50), comment="Client IP")
    request_data = Column(Text, comment="Request body (truncated)")
    status_code = Column(Integer, comment="HTTP status code")
    error_message = Column(Text, comment="Error message, if any")
    execution_time = Column(Integer, comment="Execution time in ms")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True, comment="Created at")

    __table_args__ = (
        Index("idx_operation_logs_action", "action"),
        Index("idx_operation_logs_module", "module"),
        Index("idx_operation_logs_created_at", "created_at"),
    )
