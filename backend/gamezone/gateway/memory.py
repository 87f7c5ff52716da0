"""
In-memory gateway

Dict-backed tables with auto-increment ids and foreign key checks. It has no
transactions, so multi-row operations rely on the unit of work's
compensating actions.
"""
import copy
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from gamezone.core.constants import (
    ENTITIES, ROOMS, ORDERS, ORDER_ITEMS, TRANSACTIONS, APPOINTMENTS, CAFE_PRODUCTS,
)
from gamezone.core.exceptions import PersistenceError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.utils.time_utils import utcnow, ensure_utc

# child entity -> {column: parent entity}
FOREIGN_KEYS = {
    ORDERS: {"room_id": ROOMS},
    ORDER_ITEMS: {"order_id": ORDERS, "product_id": CAFE_PRODUCTS},
    TRANSACTIONS: {"order_id": ORDERS},
    APPOINTMENTS: {"room_id": ROOMS},
}

# entities with an updated_at column
TIMESTAMPED = (ROOMS, ORDERS, APPOINTMENTS, CAFE_PRODUCTS)

# Column defaults, so rows have the same keys as the database tables
DEFAULTS = {
    ROOMS: {
        "name": None, "console_type": "PS5", "status": "available",
        "pricing_single": None, "pricing_multiplayer": None,
        "current_customer_name": None, "current_mode": None,
        "current_session_start": None, "current_session_end": None, "current_total_cost": None,
    },
    ORDERS: {
        "customer_name": None, "order_type": "room_reservation", "room_id": None,
        "total_amount": Decimal("0"), "status": "active", "start_time": None, "end_time": None,
        "mode": None, "is_open_time": False, "duration_hours": None,
    },
    ORDER_ITEMS: {
        "order_id": None, "item_type": None, "product_id": None, "item_name": None,
        "quantity": Decimal("0"), "unit_price": None, "total_price": None,
    },
    TRANSACTIONS: {
        "order_id": None, "transaction_type": "payment", "amount": None,
        "payment_method": "cash", "description": None,
    },
    APPOINTMENTS: {
        "room_id": None, "customer_name": None, "appointment_date": None,
        "appointment_time": None, "duration_hours": None, "status": "scheduled",
    },
    CAFE_PRODUCTS: {
        "name": None, "category": "drinks", "price": None, "stock": 0, "active": True,
    },
}


def _matches(row: Row, filters: Dict[str, Any]) -> bool:
    for key, expected in filters.items():
        value = row.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class InMemoryGateway(PersistenceGateway):
    supports_transactions = False

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utcnow
        self._tables: Dict[str, Dict[int, Row]] = {entity: {} for entity in ENTITIES}
        self._next_ids: Dict[str, int] = {entity: 1 for entity in ENTITIES}

    def _table(self, entity: str) -> Dict[int, Row]:
        if entity not in self._tables:
            raise PersistenceError(f"Unknown entity '{entity}'")
        return self._tables[entity]

    def _check_foreign_keys(self, entity: str, row: Row) -> None:
        for column, parent in FOREIGN_KEYS.get(entity, {}).items():
            parent_id = row.get(column)
            if parent_id is not None and parent_id not in self._tables[parent]:
                raise PersistenceError(f"{entity}.{column} references missing {parent} {parent_id}")

    def list(self, entity, filters=None, since=None, until=None) -> List[Row]:
        rows = []
        for row_id in sorted(self._table(entity)):
            row = self._tables[entity][row_id]
            if filters and not _matches(row, filters):
                continue
            created_at = ensure_utc(row.get("created_at"))
            if since is not None and (created_at is None or created_at < ensure_utc(since)):
                continue
            if until is not None and (created_at is None or created_at >= ensure_utc(until)):
                continue
            rows.append(copy.deepcopy(row))
        return rows

    def get(self, entity, id) -> Optional[Row]:
        row = self._table(entity).get(id)
        return copy.deepcopy(row) if row is not None else None

    def create(self, entity, fields) -> Row:
        table = self._table(entity)
        row = dict(DEFAULTS[entity]) if entity in DEFAULTS else {}
        row.update(copy.deepcopy(dict(fields)))
        row_id = row.get("id")
        if row_id is None:
            row_id = self._next_ids[entity]
        elif row_id in table:
            raise PersistenceError(f"{entity} {row_id} already exists")
        self._next_ids[entity] = max(self._next_ids[entity], row_id + 1)
        row["id"] = row_id

        now = self._clock()
        row.setdefault("created_at", now)
        if entity in TIMESTAMPED:
            row.setdefault("updated_at", now)

        self._check_foreign_keys(entity, row)
        table[row_id] = row
        return copy.deepcopy(row)

    def update(self, entity, id, fields) -> Row:
        table = self._table(entity)
        if id not in table:
            raise PersistenceError(f"{entity} {id} does not exist")
        row = dict(table[id])
        row.update(copy.deepcopy(dict(fields)))
        row["id"] = id
        if entity in TIMESTAMPED:
            row["updated_at"] = self._clock()
        self._check_foreign_keys(entity, row)
        table[id] = row
        return copy.deepcopy(row)

    def delete(self, entity, id) -> None:
        table = self._table(entity)
        if id not in table:
            raise PersistenceError(f"{entity} {id} does not exist")
        for child, columns in FOREIGN_KEYS.items():
            for column, parent in columns.items():
                if parent != entity:
                    continue
                if any(row.get(column) == id for row in self._tables[child].values()):
                    raise PersistenceError(f"{entity} {id} is still referenced by {child}")
        del table[id]
