"""
Database initialization script
Creates the tables and, on an empty database, the starter rooms and menu
"""
from decimal import Decimal

from gamezone.db.database import engine, Base, SessionLocal
from gamezone.gateway import SqlAlchemyGateway
from gamezone.models import (
    Room, Order, OrderItem, Transaction, Appointment, CafeProduct, OperationLog
)
from gamezone.services.catalog import RoomCatalog, ProductCatalog
from gamezone.utils.logging_utils import log_event

STARTER_ROOMS = [
    ("Room 1", "PS5"),
    ("Room 2", "PS5"),
    ("Room 3", "PS5"),
    ("Room 4", "Xbox"),
]

STARTER_MENU = [
    {"name": "Pepsi", "category": "drinks", "price": Decimal("15.00"), "stock": 48},
    {"name": "Water", "category": "drinks", "price": Decimal("10.00"), "stock": 48},
    {"name": "Turkish Coffee", "category": "drinks", "price": Decimal("20.00"), "stock": 100},
    {"name": "Chips", "category": "snacks", "price": Decimal("10.00"), "stock": 30},
    {"name": "Chocolate Bar", "category": "snacks", "price": Decimal("12.00"), "stock": 30},
    {"name": "Cheese Sandwich", "category": "meals", "price": Decimal("35.00"), "stock": 10},
]


def init_db(seed: bool = True):
    """Create all tables and seed an empty database"""
    Base.metadata.create_all(bind=engine)
    log_event("db", "tables created")
    if not seed:
        return

    db = SessionLocal()
    try:
        gateway = SqlAlchemyGateway(db)
        rooms = RoomCatalog(gateway)
        if not rooms.list():
            for name, console_type in STARTER_ROOMS:
                rooms.create(name, console_type)
            log_event("db", "rooms seeded", str(len(STARTER_ROOMS)))
        products = ProductCatalog(gateway)
        if not products.list():
            for product in STARTER_MENU:
                products.create(dict(product))
            log_event("db", "menu seeded", str(len(STARTER_MENU)))
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
