"""
Status and type values shared by models, schemas and services
"""

ROOM_STATUSES = ("available", "occupied", "cleaning", "maintenance")
ORDER_STATUSES = ("active", "paused", "completed", "cancelled")
ORDER_TYPES = ("room_reservation", "cafe_order", "combo")
ITEM_TYPES = ("room_time", "cafe_product")
APPOINTMENT_STATUSES = ("scheduled", "active", "completed", "cancelled")
TRANSACTION_TYPES = ("payment", "refund")
PAYMENT_METHODS = ("cash", "card", "transfer")
CONSOLE_TYPES = ("PS5", "Xbox")
GAME_MODES = ("single", "multiplayer")
CAFE_CATEGORIES = ("drinks", "snacks", "meals")
REPORT_PERIODS = ("daily", "weekly", "monthly", "quarterly", "half-yearly", "yearly")

# Orders that still hold money owed
OPEN_ORDER_STATUSES = ("active", "paused")

# Gateway entity names (table names)
ROOMS = "rooms"
ORDERS = "orders"
ORDER_ITEMS = "order_items"
TRANSACTIONS = "transactions"
APPOINTMENTS = "appointments"
CAFE_PRODUCTS = "cafe_products"

ENTITIES = (ROOMS, ORDERS, ORDER_ITEMS, TRANSACTIONS, APPOINTMENTS, CAFE_PRODUCTS)
