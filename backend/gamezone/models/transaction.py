"""
Payment transaction model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gamezone.db.database import Base


class Transaction(Base):
    """Transactions table (immutable record of money movement)"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True, comment="Order ID")
    transaction_type = Column(String(20), nullable=False, default="payment", comment="Type: payment, refund")
    amount = Column(Numeric(10, 2), nullable=False, comment="Amount")
    payment_method = Column(String(20), nullable=False, default="cash", comment="Payment method: cash, card, transfer")
    description = Column(String(500), comment="Description")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True, comment="Created at")

    # Relationships
    order = relationship("Order", back_populates="transactions")

    __table_args__ = (
        Index("idx_transactions_order_id", "order_id"),
        Index("idx_transactions_created_at", "created_at"),
    )
