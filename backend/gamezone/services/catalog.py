"""
Rooms and cafe products

Plain CRUD with the checks the session engine relies on: room status is only
changed by hand between available, cleaning and maintenance, and rows that
orders or appointments still reference are not deleted.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from gamezone.config import DEFAULT_PRICING
from gamezone.core.constants import (
    ROOMS, ORDERS, ORDER_ITEMS, APPOINTMENTS, CAFE_PRODUCTS,
    CONSOLE_TYPES, CAFE_CATEGORIES,
)
from gamezone.core.exceptions import ConflictError, NotFoundError, ValidationError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.services.unit_of_work import UnitOfWork
from gamezone.utils.logging_utils import get_logger
from gamezone.utils.money import to_money

logger = get_logger("catalog")

MANUAL_ROOM_STATUSES = ("available", "cleaning", "maintenance")


def _check_choice(value, choices, label):
    if value not in choices:
        raise ValidationError(f"{label} must be one of {', '.join(choices)}")


def _check_price(value, label) -> Decimal:
    price = to_money(value)
    if price < 0:
        raise ValidationError(f"{label} cannot be negative")
    return price


class RoomCatalog:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def list(self, status: Optional[str] = None) -> List[Row]:
        return self.gateway.list(ROOMS, {"status": status} if status else None)

    def get(self, room_id: int) -> Row:
        room = self.gateway.get(ROOMS, room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def _check_name(self, name: str, room_id: Optional[int] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Room name is required")
        for other in self.gateway.list(ROOMS, {"name": name}):
            if other["id"] != room_id:
                raise ConflictError(f"A room named {name} already exists")
        return name

    def create(self, name: str, console_type: str = "PS5", pricing_single=None, pricing_multiplayer=None) -> Row:
        _check_choice(console_type, CONSOLE_TYPES, "Console type")
        name = self._check_name(name)
        defaults = DEFAULT_PRICING[console_type]
        fields = {
            "name": name,
            "console_type": console_type,
            "status": "available",
            "pricing_single": _check_price(
                defaults["single"] if pricing_single is None else pricing_single, "Single rate"),
            "pricing_multiplayer": _check_price(
                defaults["multiplayer"] if pricing_multiplayer is None else pricing_multiplayer, "Multiplayer rate"),
        }
        with UnitOfWork(self.gateway, "create room") as uow:
            room = uow.create(ROOMS, fields)
        logger.info("Room %s created (%s, %s/%s per hour)", room["name"], console_type,
                    room["pricing_single"], room["pricing_multiplayer"])
        return room

    def update(self, room_id: int, fields: Dict) -> Row:
        room = self.get(room_id)
        fields = {k: v for k, v in fields.items() if v is not None}
        if "name" in fields:
            fields["name"] = self._check_name(fields["name"], room_id)
        if "console_type" in fields:
            _check_choice(fields["console_type"], CONSOLE_TYPES, "Console type")
        for key in ("pricing_single", "pricing_multiplayer"):
            if key in fields:
                fields[key] = _check_price(fields[key], key.replace("_", " "))
        if "status" in fields and fields["status"] != room["status"]:
            _check_choice(fields["status"], MANUAL_ROOM_STATUSES, "Room status")
            if room["status"] == "occupied":
                raise ConflictError(f"Room {room['name']} is occupied; stop the session first")
        if not fields:
            return room

        with UnitOfWork(self.gateway, "update room") as uow:
            room = uow.update(ROOMS, room_id, fields)
        logger.info("Room %s updated: %s", room_id, ", ".join(sorted(fields)))
        return room

    def delete(self, room_id: int) -> None:
        room = self.get(room_id)
        if room["status"] == "occupied":
            raise ConflictError(f"Room {room['name']} is occupied")
        if self.gateway.list(ORDERS, {"room_id": room_id}) or self.gateway.list(APPOINTMENTS, {"room_id": room_id}):
            raise ConflictError(f"Room {room['name']} has orders or appointments and cannot be deleted")
        with UnitOfWork(self.gateway, "delete room") as uow:
            uow.delete(ROOMS, room_id)
        logger.info("Room %s deleted", room["name"])


class ProductCatalog:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def list(self, category: Optional[str] = None, active: Optional[bool] = None) -> List[Row]:
        filters = {}
        if category:
            filters["category"] = category
        if active is not None:
            filters["active"] = active
        return self.gateway.list(CAFE_PRODUCTS, filters)

    def get(self, product_id: int) -> Row:
        product = self.gateway.get(CAFE_PRODUCTS, product_id)
        if product is None:
            raise NotFoundError(f"Cafe product {product_id} not found")
        return product

    def _clean(self, fields: Dict) -> Dict:
        fields = {k: v for k, v in fields.items() if v is not None}
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if not fields["name"]:
                raise ValidationError("Product name is required")
        if "category" in fields:
            _check_choice(fields["category"], CAFE_CATEGORIES, "Category")
        if "price" in fields:
            fields["price"] = _check_price(fields["price"], "Price")
        if "stock" in fields and fields["stock"] < 0:
            raise ValidationError("Stock cannot be negative")
        return fields

    def create(self, fields: Dict) -> Row:
        fields = self._clean(dict({"category": "drinks", "stock": 0, "active": True}, **fields))
        if "name" not in fields or "price" not in fields:
            raise ValidationError("Name and price are required")
        with UnitOfWork(self.gateway, "create product") as uow:
            product = uow.create(CAFE_PRODUCTS, fields)
        logger.info("Cafe product %s created at %s", product["name"], product["price"])
        return product

    def update(self, product_id: int, fields: Dict) -> Row:
        product = self.get(product_id)
        fields = self._clean(fields)
        if not fields:
            return product
        with UnitOfWork(self.gateway, "update product") as uow:
            product = uow.update(CAFE_PRODUCTS, product_id, fields)
        logger.info("Cafe product %s updated: %s", product_id, ", ".join(sorted(fields)))
        return product

    def adjust_stock(self, product_id: int, adjustment: int) -> Row:
        product = self.get(product_id)
        new_stock = (product["stock"] or 0) + adjustment
        if new_stock < 0:
            raise ValidationError(f"Only {product['stock']} {product['name']} in stock")
        with UnitOfWork(self.gateway, "adjust stock") as uow:
            product = uow.update(CAFE_PRODUCTS, product_id, {"stock": new_stock})
        logger.info("Cafe product %s stock %+d -> %s", product["name"], adjustment, new_stock)
        return product

    def delete(self, product_id: int) -> None:
        product = self.get(product_id)
        used = self.gateway.list(ORDER_ITEMS, {"product_id": product_id})
        if used:
            raise ConflictError(
                f"{product['name']} appears on {len(used)} order line(s); disable it instead of deleting"
            )
        with UnitOfWork(self.gateway, "delete product") as uow:
            uow.delete(CAFE_PRODUCTS, product_id)
        logger.info("Cafe product %s deleted", product["name"])
