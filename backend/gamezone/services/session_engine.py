"""
Session engine

State machine for a room's occupancy and its paired order:

    available -> occupied(active) -> paused | completed
    paused -> occupied(active)        (reactivate)
    paused -> completed               (pay)

Metered ("open time") sessions are billed by elapsed time when they stop;
fixed sessions keep their committed price unless time is adjusted. Every
operation checks its preconditions before writing, then does all of its
writes in one unit of work.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from gamezone.core.constants import ROOMS, ORDERS, ORDER_ITEMS, TRANSACTIONS, OPEN_ORDER_STATUSES
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.services.order_composer import (
    append_room_time, get_order, recompute_total, split_costs,
)
from gamezone.services.pricing import (
    check_customer_name, check_duration, check_mode, check_payment_method,
    hourly_rate, room_time_name,
)
from gamezone.services.unit_of_work import UnitOfWork
from gamezone.utils.logging_utils import get_logger
from gamezone.utils.money import line_total, money_sum, to_decimal, to_hours, to_money
from gamezone.utils.time_utils import add_hours, elapsed_hours, ensure_utc, utcnow

logger = get_logger("sessions")

CLEARED_SESSION = {
    "current_customer_name": None,
    "current_mode": None,
    "current_session_start": None,
    "current_session_end": None,
}


@dataclass
class SessionResult:
    order: Row
    room: Optional[Row] = None
    items: List[Row] = field(default_factory=list)
    transaction: Optional[Row] = None
    room_cost: Optional[Decimal] = None
    cafe_cost: Optional[Decimal] = None


@dataclass
class LiveCost:
    room_id: int
    order_id: int
    is_open_time: bool
    elapsed_hours: Decimal
    room_cost: Decimal
    cafe_cost: Decimal
    total: Decimal
    ends_at: Optional[datetime]
    overdue: bool


class SessionEngine:
    """Room session lifecycle"""

    def __init__(self, gateway: PersistenceGateway, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self.clock = clock or utcnow

    # Lookups

    def _get_room(self, room_id: int) -> Row:
        room = self.gateway.get(ROOMS, room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def _active_order_for_room(self, room_id: int) -> Optional[Row]:
        orders = self.gateway.list(ORDERS, {"room_id": room_id, "status": "active"})
        if len(orders) > 1:
            raise ConflictError(
                f"Room {room_id} has {len(orders)} active orders; resolve them before continuing"
            )
        return orders[0] if orders else None

    def _require_occupied(self, room: Row) -> Row:
        if room["status"] != "occupied":
            raise ConflictError(f"Room {room['name']} is {room['status']}, no session is running")
        order = self._active_order_for_room(room["id"])
        if order is None:
            raise ConflictError(f"Room {room['name']} is occupied but has no active order")
        return order

    # Shared writes

    def _release_room(self, uow: UnitOfWork, room_id: int, room_cost: Optional[Decimal]) -> Row:
        fields = dict(CLEARED_SESSION)
        fields["status"] = "available"
        fields["current_total_cost"] = room_cost
        return uow.update(ROOMS, room_id, fields)

    def _record_payment(self, uow: UnitOfWork, order: Row, amount: Decimal, payment_method: str,
                        now: datetime, description: str) -> Row:
        return uow.create(TRANSACTIONS, {
            "order_id": order["id"],
            "transaction_type": "payment",
            "amount": to_money(amount),
            "payment_method": payment_method,
            "description": description,
            "created_at": now,
        })

    # Operations

    def start_session(self, room_id: int, customer_name: str, mode: str,
                      duration_hours: Optional[Decimal] = None,
                      order_id: Optional[int] = None) -> SessionResult:
        """Occupy an available room; duration_hours=None starts open time"""
        customer_name = check_customer_name(customer_name)
        check_mode(mode)
        duration = check_duration(duration_hours)

        room = self._get_room(room_id)
        if room["status"] != "available":
            raise ConflictError(f"Room {room['name']} is {room['status']} and cannot start a session")
        if self._active_order_for_room(room_id) is not None:
            raise ConflictError(f"Room {room['name']} already has an active order")

        attach_to = None
        if order_id is not None:
            attach_to = get_order(self.gateway, order_id)
            if attach_to["status"] != "active" or attach_to["room_id"] is not None:
                raise ConflictError(f"Order {order_id} is not an open cafe order and cannot take a room")
            # The room shows the name the tab was opened under
            customer_name = attach_to["customer_name"]

        now = self.clock()
        end = add_hours(now, duration) if duration is not None else None
        session_fields = {
            "room_id": room_id,
            "start_time": now,
            "end_time": end,
            "mode": mode,
            "is_open_time": duration is None,
            "duration_hours": to_hours(duration) if duration is not None else None,
        }

        with UnitOfWork(self.gateway, "start session") as uow:
            if attach_to is not None:
                order = uow.update(ORDERS, attach_to["id"], dict(session_fields, order_type="combo"))
            else:
                order = uow.create(ORDERS, dict(
                    session_fields,
                    customer_name=customer_name,
                    order_type="room_reservation",
                    total_amount=Decimal("0"),
                    status="active",
                ))
            item = append_room_time(uow, order["id"], room, mode, duration)
            recompute_total(uow, order["id"])
            room = uow.update(ROOMS, room_id, {
                "status": "occupied",
                "current_customer_name": customer_name,
                "current_mode": mode,
                "current_session_start": now,
                "current_session_end": end,
                "current_total_cost": None,
            })
            order = uow.get(ORDERS, order["id"])

        logger.info("Room %s: session started for %s (%s, %s), order %s",
                    room["name"], customer_name, mode,
                    "open time" if duration is None else f"{duration}h", order["id"])
        return SessionResult(order=order, room=room, items=[item])

    def stop_session(self, room_id: int, force_complete: bool = False,
                     payment_method: str = "cash") -> SessionResult:
        """Free the room; open time and forced stops are paid now, fixed sessions are paused"""
        check_payment_method(payment_method)
        room = self._get_room(room_id)
        order = self._require_occupied(room)
        mode = order["mode"] or room["current_mode"]
        now = self.clock()
        # Lines are priced on the stored, rounded quantity
        elapsed = to_hours(elapsed_hours(room["current_session_start"], now))

        with UnitOfWork(self.gateway, "stop session") as uow:
            if order["is_open_time"]:
                rate = hourly_rate(room, mode)
                items = uow.list(ORDER_ITEMS, {"order_id": order["id"]})
                placeholders = [
                    i for i in items
                    if i["item_type"] == "room_time" and to_decimal(i["quantity"]) == 0
                ]
                played = f"{elapsed.normalize():f}h played"
                if placeholders:
                    uow.update(ORDER_ITEMS, placeholders[-1]["id"], {
                        "item_name": room_time_name(room, mode, None, played),
                        "quantity": elapsed,
                        "unit_price": rate,
                        "total_price": line_total(elapsed, rate),
                    })
                else:
                    uow.create(ORDER_ITEMS, {
                        "order_id": order["id"],
                        "item_type": "room_time",
                        "item_name": room_time_name(room, mode, None, played),
                        "quantity": elapsed,
                        "unit_price": rate,
                        "total_price": line_total(elapsed, rate),
                    })

            items = uow.list(ORDER_ITEMS, {"order_id": order["id"]})
            room_cost, cafe_cost = split_costs(items)
            total = money_sum([room_cost, cafe_cost])
            completed = force_complete or order["is_open_time"]

            fields = {"status": "completed" if completed else "paused", "total_amount": total}
            if completed:
                fields["end_time"] = now
            order = uow.update(ORDERS, order["id"], fields)
            room = self._release_room(uow, room_id, room_cost)

            transaction = None
            if completed:
                transaction = self._record_payment(
                    uow, order, total, payment_method, now,
                    f"Session payment for {order['customer_name']} ({room['name']})",
                )

        logger.info("Room %s: session stopped after %sh, room %s + cafe %s = %s, order %s %s",
                    room["name"], elapsed, room_cost, cafe_cost, total,
                    order["id"], order["status"])
        return SessionResult(order=order, room=room, items=items, transaction=transaction,
                             room_cost=room_cost, cafe_cost=cafe_cost)

    def reactivate_session(self, order_id: int, duration_hours: Optional[Decimal] = None) -> SessionResult:
        """Resume a paused order in its (free) room"""
        duration = check_duration(duration_hours)
        order = get_order(self.gateway, order_id)
        if order["status"] != "paused":
            raise ConflictError(f"Order {order_id} is {order['status']}, only paused orders can be reactivated")
        if order["room_id"] is None:
            raise ConflictError(f"Order {order_id} has no room to reactivate")
        room = self._get_room(order["room_id"])
        if room["status"] != "available":
            raise ConflictError(f"Room {room['name']} is not available for reactivation")
        if self._active_order_for_room(room["id"]) is not None:
            raise ConflictError(f"Room {room['name']} already has an active order")

        mode = order["mode"] or "single"
        now = self.clock()
        end = add_hours(now, duration) if duration is not None else None

        with UnitOfWork(self.gateway, "reactivate session") as uow:
            item = append_room_time(uow, order_id, room, mode, duration, note="resumed")
            recompute_total(uow, order_id)
            order = uow.update(ORDERS, order_id, {
                "status": "active",
                "start_time": now,
                "end_time": end,
                "is_open_time": duration is None,
                "duration_hours": to_hours(duration) if duration is not None else None,
            })
            room = uow.update(ROOMS, room["id"], {
                "status": "occupied",
                "current_customer_name": order["customer_name"],
                "current_mode": mode,
                "current_session_start": now,
                "current_session_end": end,
                "current_total_cost": None,
            })

        logger.info("Room %s: order %s reactivated for %s", room["name"], order_id, order["customer_name"])
        return SessionResult(order=order, room=room, items=[item])

    def _shift_end(self, order: Row, room: Row, delta: Decimal, move_room: bool) -> SessionResult:
        if move_room:
            start, end = room["current_session_start"], room["current_session_end"]
        else:
            start, end = order["start_time"], order["end_time"]
        new_end = add_hours(end, delta)
        if start is not None and new_end <= ensure_utc(start):
            raise ValidationError("Adjustment would end the session at or before its start")

        mode = order["mode"] or room["current_mode"] or "single"
        duration = to_decimal(order["duration_hours"]) + delta

        with UnitOfWork(self.gateway, "adjust time") as uow:
            item = append_room_time(uow, order["id"], room, mode, delta, note="time adjustment", signed=True)
            recompute_total(uow, order["id"])
            order = uow.update(ORDERS, order["id"], {
                "end_time": new_end,
                "duration_hours": to_hours(duration),
            })
            if move_room:
                room = uow.update(ROOMS, room["id"], {"current_session_end": new_end})

        logger.info("Order %s: end moved by %sh to %s, total %s",
                    order["id"], delta, new_end.isoformat(), order["total_amount"])
        return SessionResult(order=order, room=room, items=[item])

    def adjust_time(self, room_id: int, delta_hours: Decimal) -> SessionResult:
        """Move a live fixed session's end by delta_hours (negative shortens it)"""
        delta = to_decimal(delta_hours)
        if delta == 0:
            raise ValidationError("Time adjustment cannot be zero")
        room = self._get_room(room_id)
        order = self._require_occupied(room)
        if room["current_session_end"] is None or order["is_open_time"]:
            raise ConflictError(f"Room {room['name']} is on open time, there is no end time to adjust")
        return self._shift_end(order, room, delta, move_room=True)

    def extend_time(self, order_id: int, add_hours: Decimal) -> SessionResult:
        """Like adjust_time, addressed by order; a paused order only moves itself"""
        delta = to_decimal(add_hours)
        if delta == 0:
            raise ValidationError("Time extension cannot be zero")
        order = get_order(self.gateway, order_id)
        if order["status"] not in OPEN_ORDER_STATUSES:
            raise ConflictError(f"Order {order_id} is {order['status']} and cannot be extended")
        if order["room_id"] is None:
            raise ConflictError(f"Order {order_id} has no room time to extend")
        if order["is_open_time"] or order["end_time"] is None:
            raise ConflictError(f"Order {order_id} is on open time, there is no end time to extend")

        room = self._get_room(order["room_id"])
        live = order["status"] == "active" and room["status"] == "occupied"
        return self._shift_end(order, room, delta, move_room=live)

    def complete_payment(self, order_id: int, payment_method: str = "cash") -> SessionResult:
        """Mark an order paid for its current total_amount"""
        check_payment_method(payment_method)
        order = get_order(self.gateway, order_id)
        if order["status"] not in OPEN_ORDER_STATUSES:
            raise ConflictError(f"Order {order_id} is {order['status']} and cannot be paid")

        room = None
        live = False
        if order["status"] == "active" and order["room_id"] is not None:
            room = self._get_room(order["room_id"])
            live = room["status"] == "occupied"
            if live and order["is_open_time"]:
                raise ConflictError(
                    f"Room {room['name']} is still on open time; stop the session so its cost is final"
                )

        now = self.clock()
        with UnitOfWork(self.gateway, "complete payment") as uow:
            if live:
                room_cost, _ = split_costs(uow.list(ORDER_ITEMS, {"order_id": order_id}))
                room = self._release_room(uow, room["id"], room_cost)
            order = uow.update(ORDERS, order_id, {"status": "completed", "end_time": now})
            transaction = self._record_payment(
                uow, order, order["total_amount"], payment_method, now,
                f"Order completion payment for {order['customer_name']}",
            )

        logger.info("Order %s paid %s by %s", order_id, transaction["amount"], payment_method)
        return SessionResult(order=order, room=room, transaction=transaction)

    def cancel_order(self, order_id: int) -> SessionResult:
        """Cancel an unpaid order, freeing its room if the session is live"""
        order = get_order(self.gateway, order_id)
        if order["status"] not in OPEN_ORDER_STATUSES:
            raise ConflictError(f"Order {order_id} is {order['status']} and cannot be cancelled")

        room = None
        live = False
        if order["status"] == "active" and order["room_id"] is not None:
            room = self._get_room(order["room_id"])
            live = room["status"] == "occupied"

        now = self.clock()
        with UnitOfWork(self.gateway, "cancel order") as uow:
            if live:
                room = self._release_room(uow, room["id"], None)
            order = uow.update(ORDERS, order_id, {"status": "cancelled", "end_time": now})

        logger.info("Order %s cancelled", order_id)
        return SessionResult(order=order, room=room)

    def refund_order(self, order_id: int, amount: Decimal, payment_method: str = "cash",
                     reason: Optional[str] = None) -> Row:
        """Record a refund against a completed order, up to what is still refundable"""
        check_payment_method(payment_method)
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Refund amount must be positive")
        order = get_order(self.gateway, order_id)
        if order["status"] != "completed":
            raise ConflictError(f"Order {order_id} is {order['status']}, only completed orders can be refunded")

        transactions = self.gateway.list(TRANSACTIONS, {"order_id": order_id})
        paid = money_sum(t["amount"] for t in transactions if t["transaction_type"] == "payment")
        refunded = money_sum(t["amount"] for t in transactions if t["transaction_type"] == "refund")
        if amount > paid - refunded:
            raise ValidationError(f"Refund {amount} exceeds the refundable balance {paid - refunded}")

        now = self.clock()
        with UnitOfWork(self.gateway, "refund") as uow:
            transaction = uow.create(TRANSACTIONS, {
                "order_id": order_id,
                "transaction_type": "refund",
                "amount": amount,
                "payment_method": payment_method,
                "description": reason or f"Refund for {order['customer_name']}",
                "created_at": now,
            })
        logger.info("Order %s refunded %s by %s", order_id, amount, payment_method)
        return transaction

    # Read-only views for the polling UI

    def live_cost(self, room_id: int) -> LiveCost:
        """Cost accrued so far by the room's running session"""
        room = self._get_room(room_id)
        order = self._require_occupied(room)
        now = self.clock()
        elapsed = to_hours(elapsed_hours(room["current_session_start"], now))
        items = self.gateway.list(ORDER_ITEMS, {"order_id": order["id"]})
        room_cost, cafe_cost = split_costs(items)
        if order["is_open_time"]:
            rate = hourly_rate(room, order["mode"] or room["current_mode"])
            room_cost = money_sum([room_cost, line_total(elapsed, rate)])
        ends_at = room["current_session_end"]
        return LiveCost(
            room_id=room_id,
            order_id=order["id"],
            is_open_time=bool(order["is_open_time"]),
            elapsed_hours=elapsed,
            room_cost=room_cost,
            cafe_cost=cafe_cost,
            total=money_sum([room_cost, cafe_cost]),
            ends_at=ends_at,
            overdue=ends_at is not None and ensure_utc(ends_at) <= now,
        )

    def expired_sessions(self) -> List[Row]:
        """Occupied fixed-time rooms past their end; they stay billable until staff act"""
        now = self.clock()
        return [
            room for room in self.gateway.list(ROOMS, {"status": "occupied"})
            if room["current_session_end"] is not None and ensure_utc(room["current_session_end"]) <= now
        ]
