"""
Order composer

Builds an order's line items from room time and cafe products and keeps
`total_amount` equal to the sum of the lines. The module-level helpers take
any gateway-like store so the session engine can reuse them inside its own
unit of work.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from gamezone.core.constants import (
    ORDERS, ORDER_ITEMS, TRANSACTIONS, ROOMS, CAFE_PRODUCTS, OPEN_ORDER_STATUSES,
)
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.services.pricing import (
    check_customer_name, check_payment_method, hourly_rate, room_time_name,
)
from gamezone.services.unit_of_work import UnitOfWork
from gamezone.utils.logging_utils import get_logger
from gamezone.utils.money import line_total, money_sum, to_decimal, to_hours
from gamezone.utils.time_utils import utcnow

logger = get_logger("orders")


@dataclass
class ComposeResult:
    order: Row
    items: List[Row] = field(default_factory=list)
    transaction: Optional[Row] = None


def get_order(store: PersistenceGateway, order_id: int) -> Row:
    order = store.get(ORDERS, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def require_open_order(order: Row) -> None:
    if order["status"] not in OPEN_ORDER_STATUSES:
        raise ConflictError(f"Order {order['id']} is {order['status']} and can no longer be changed")


def split_costs(items: List[Row]) -> Tuple[Decimal, Decimal]:
    """(room cost, cafe cost) of an order's lines"""
    room_cost = money_sum(i["total_price"] for i in items if i["item_type"] == "room_time")
    cafe_cost = money_sum(i["total_price"] for i in items if i["item_type"] == "cafe_product")
    return room_cost, cafe_cost


def recompute_total(store: PersistenceGateway, order_id: int) -> Decimal:
    """Sum every line again and persist it as the order total"""
    items = store.list(ORDER_ITEMS, {"order_id": order_id})
    total = money_sum(item["total_price"] for item in items)
    store.update(ORDERS, order_id, {"total_amount": total})
    return total


def append_room_time(
    store: PersistenceGateway,
    order_id: int,
    room: Row,
    mode: str,
    hours: Optional[Decimal] = None,
    note: str = "",
    signed: bool = False,
) -> Row:
    """Room time line; open time (hours=None) is a zero-quantity placeholder"""
    rate = hourly_rate(room, mode)
    quantity = Decimal("0") if hours is None else to_hours(hours)
    return store.create(ORDER_ITEMS, {
        "order_id": order_id,
        "item_type": "room_time",
        "item_name": room_time_name(room, mode, hours, note, signed),
        "quantity": quantity,
        "unit_price": rate,
        "total_price": line_total(to_decimal(hours or 0), rate),
    })


def resolve_selections(store: PersistenceGateway, selections: Dict[int, int]) -> List[Tuple[Row, int]]:
    """Validate {product_id: quantity}; zero quantities are skipped"""
    resolved = []
    for product_id, quantity in (selections or {}).items():
        if isinstance(quantity, bool) or int(quantity) != quantity:
            raise ValidationError(f"Quantity for product {product_id} must be a whole number")
        quantity = int(quantity)
        if quantity < 0:
            raise ValidationError(f"Quantity for product {product_id} cannot be negative")
        if quantity == 0:
            continue
        product = store.get(CAFE_PRODUCTS, int(product_id))
        if product is None:
            raise ValidationError(f"Cafe product {product_id} does not exist")
        if not product["active"]:
            raise ValidationError(f"Cafe product '{product['name']}' is disabled")
        if quantity > (product["stock"] or 0):
            # Stock is reconciled by staff, sales never decrement it
            logger.warning("Selling %s x %s with only %s in stock", quantity, product["name"], product["stock"])
        resolved.append((product, quantity))
    if not resolved:
        raise ValidationError("Select at least one cafe product")
    return resolved


def append_cafe_items(store: PersistenceGateway, order_id: int, resolved: List[Tuple[Row, int]]) -> List[Row]:
    items = []
    for product, quantity in resolved:
        items.append(store.create(ORDER_ITEMS, {
            "order_id": order_id,
            "item_type": "cafe_product",
            "product_id": product["id"],
            "item_name": product["name"],
            "quantity": Decimal(quantity),
            "unit_price": to_decimal(product["price"]),
            "total_price": line_total(quantity, product["price"]),
        }))
    return items


class OrderComposer:
    """Line item operations on orders"""

    def __init__(self, gateway: PersistenceGateway, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self.clock = clock or utcnow

    def add_room_time_item(self, order_id: int, room_id: int, mode: str, hours: Optional[Decimal] = None) -> Row:
        """Append a room time line for the order's own room and recompute its total

        hours=None adds an open-time line, which only the running open-time
        session of that room can take; it is priced when the session stops.
        """
        order = get_order(self.gateway, order_id)
        require_open_order(order)
        room = self.gateway.get(ROOMS, room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        if order["room_id"] != room_id:
            raise ConflictError(f"Order {order_id} is not a session of {room['name']}")
        if hours is None:
            live = order["status"] == "active" and room["status"] == "occupied"
            if not (live and order["is_open_time"]):
                raise ConflictError(
                    f"Order {order_id} is not running open time in {room['name']}, give the hours to add"
                )
        elif to_decimal(hours) <= 0:
            raise ValidationError("Hours must be positive")

        with UnitOfWork(self.gateway, "add room time") as uow:
            item = append_room_time(uow, order_id, room, mode, hours)
            total = recompute_total(uow, order_id)
        logger.info("Order %s: added %s, total %s", order_id, item["item_name"], total)
        return item

    def add_cafe_items(
        self,
        selections: Dict[int, int],
        order_id: Optional[int] = None,
        customer_name: Optional[str] = None,
        payment_method: str = "cash",
    ) -> ComposeResult:
        """Attach cafe lines to an open order, or sell them as a new paid cafe order"""
        if order_id is None:
            return self.create_cafe_order(customer_name, selections, payment_method)

        order = get_order(self.gateway, order_id)
        require_open_order(order)
        resolved = resolve_selections(self.gateway, selections)

        with UnitOfWork(self.gateway, "add cafe items") as uow:
            items = append_cafe_items(uow, order_id, resolved)
            if order["order_type"] == "room_reservation":
                uow.update(ORDERS, order_id, {"order_type": "combo"})
            recompute_total(uow, order_id)
            order = uow.get(ORDERS, order_id)

        logger.info("Order %s: added %d cafe line(s), total %s", order_id, len(items), order["total_amount"])
        # The order's own payment covers these lines later
        return ComposeResult(order=order, items=items)

    def create_cafe_order(self, customer_name: Optional[str], selections: Dict[int, int],
                          payment_method: str = "cash", pay_now: bool = True) -> ComposeResult:
        """Counter sale: order, lines and payment in one unit of work

        With pay_now=False the order stays active as an open tab, to be paid
        later or attached to a room session.
        """
        customer_name = check_customer_name(customer_name)
        if pay_now:
            check_payment_method(payment_method)
        resolved = resolve_selections(self.gateway, selections)
        now = self.clock()

        with UnitOfWork(self.gateway, "cafe order") as uow:
            order = uow.create(ORDERS, {
                "customer_name": customer_name,
                "order_type": "cafe_order",
                "room_id": None,
                "total_amount": Decimal("0"),
                "status": "completed" if pay_now else "active",
                "start_time": now,
                "end_time": now if pay_now else None,
                "is_open_time": False,
            })
            items = append_cafe_items(uow, order["id"], resolved)
            total = recompute_total(uow, order["id"])
            order = uow.get(ORDERS, order["id"])
            if not pay_now:
                logger.info("Cafe tab %s opened for %s, total %s", order["id"], customer_name, total)
                return ComposeResult(order=order, items=items)
            transaction = uow.create(TRANSACTIONS, {
                "order_id": order["id"],
                "transaction_type": "payment",
                "amount": total,
                "payment_method": payment_method,
                "description": f"Cafe order for {customer_name}",
                "created_at": now,
            })

        logger.info("Cafe order %s for %s paid %s by %s", order["id"], customer_name, total, payment_method)
        return ComposeResult(order=order, items=items, transaction=transaction)

    def compute_total(self, order_id: int) -> Decimal:
        get_order(self.gateway, order_id)
        with UnitOfWork(self.gateway, "recompute total") as uow:
            return recompute_total(uow, order_id)

    def _get_cafe_item(self, order: Row, item_id: int) -> Row:
        item = self.gateway.get(ORDER_ITEMS, item_id)
        if item is None or item["order_id"] != order["id"]:
            raise NotFoundError(f"Item {item_id} not found on order {order['id']}")
        if item["item_type"] != "cafe_product":
            raise ConflictError("Room time lines change through time adjustment, not item edits")
        return item

    def update_item_quantity(self, order_id: int, item_id: int, quantity: int) -> Row:
        order = get_order(self.gateway, order_id)
        require_open_order(order)
        item = self._get_cafe_item(order, item_id)
        if isinstance(quantity, bool) or int(quantity) != quantity or quantity <= 0:
            raise ValidationError("Quantity must be a positive whole number")

        with UnitOfWork(self.gateway, "update item") as uow:
            item = uow.update(ORDER_ITEMS, item_id, {
                "quantity": Decimal(int(quantity)),
                "total_price": line_total(int(quantity), item["unit_price"]),
            })
            total = recompute_total(uow, order_id)
        logger.info("Order %s: item %s set to %s, total %s", order_id, item_id, quantity, total)
        return item

    def remove_item(self, order_id: int, item_id: int) -> Decimal:
        order = get_order(self.gateway, order_id)
        require_open_order(order)
        self._get_cafe_item(order, item_id)

        with UnitOfWork(self.gateway, "remove item") as uow:
            uow.delete(ORDER_ITEMS, item_id)
            total = recompute_total(uow, order_id)
        logger.info("Order %s: item %s removed, total %s", order_id, item_id, total)
        return total
