"""
Database models
"""
from gamezone.models.room import Room
from gamezone.models.order import Order
from gamezone.models.order_item import OrderItem
from gamezone.models.transaction import Transaction
from gamezone.models.appointment import Appointment
from gamezone.models.cafe_product import CafeProduct
from gamezone.models.operation_log import OperationLog

__all__ = [
    "Room",
    "Order",
    "OrderItem",
    "Transaction",
    "Appointment",
    "CafeProduct",
    "OperationLog",
]
