"""
SQLAlchemy gateway

Maps entity names to ORM models. Outside a transaction every call commits on
its own; between `begin()` and `commit()` calls only flush, so the unit of
work can roll the whole operation back.
"""
import functools
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gamezone.core.constants import (
    ROOMS, ORDERS, ORDER_ITEMS, TRANSACTIONS, APPOINTMENTS, CAFE_PRODUCTS,
)
from gamezone.core.exceptions import PersistenceError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.models import Room, Order, OrderItem, Transaction, Appointment, CafeProduct
from gamezone.utils.time_utils import ensure_utc

MODELS = {
    ROOMS: Room,
    ORDERS: Order,
    ORDER_ITEMS: OrderItem,
    TRANSACTIONS: Transaction,
    APPOINTMENTS: Appointment,
    CAFE_PRODUCTS: CafeProduct,
}


def _guarded(method):
    """Turn SQLAlchemy errors into PersistenceError"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            if not self._in_transaction:
                self.db.rollback()
            raise PersistenceError(f"Database error: {e.__class__.__name__}: {e}") from e
    return wrapper


class SqlAlchemyGateway(PersistenceGateway):
    supports_transactions = True

    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    def _model(self, entity: str):
        model = MODELS.get(entity)
        if model is None:
            raise PersistenceError(f"Unknown entity '{entity}'")
        return model

    def _column(self, model, name: str):
        if name not in model.__table__.columns:
            raise PersistenceError(f"{model.__tablename__} has no column '{name}'")
        return getattr(model, name)

    @staticmethod
    def _to_row(obj) -> Row:
        row = {}
        for column in obj.__table__.columns:
            value = getattr(obj, column.name)
            if isinstance(value, datetime):
                value = ensure_utc(value)
            row[column.name] = value
        return row

    def _finish(self) -> None:
        if self._in_transaction:
            self.db.flush()
        else:
            self.db.commit()

    @_guarded
    def list(self, entity, filters=None, since=None, until=None) -> List[Row]:
        model = self._model(entity)
        query = self.db.query(model)
        for key, value in (filters or {}).items():
            column = self._column(model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)
        if since is not None:
            query = query.filter(model.created_at >= ensure_utc(since))
        if until is not None:
            query = query.filter(model.created_at < ensure_utc(until))
        return [self._to_row(obj) for obj in query.order_by(model.id).all()]

    @_guarded
    def get(self, entity, id) -> Optional[Row]:
        obj = self.db.get(self._model(entity), id)
        return self._to_row(obj) if obj is not None else None

    @_guarded
    def create(self, entity, fields) -> Row:
        model = self._model(entity)
        for key in fields:
            self._column(model, key)
        obj = model(**fields)
        self.db.add(obj)
        self._finish()
        self.db.refresh(obj)
        return self._to_row(obj)

    @_guarded
    def update(self, entity, id, fields) -> Row:
        model = self._model(entity)
        obj = self.db.get(model, id)
        if obj is None:
            raise PersistenceError(f"{entity} {id} does not exist")
        for key, value in fields.items():
            self._column(model, key)
            setattr(obj, key, value)
        self._finish()
        self.db.refresh(obj)
        return self._to_row(obj)

    @_guarded
    def delete(self, entity, id) -> None:
        obj = self.db.get(self._model(entity), id)
        if obj is None:
            raise PersistenceError(f"{entity} {id} does not exist")
        self.db.delete(obj)
        self._finish()

    def begin(self) -> None:
        self._in_transaction = True

    @_guarded
    def commit(self) -> None:
        self._in_transaction = False
        self.db.commit()

    def rollback(self) -> None:
        self._in_transaction = False
        self.db.rollback()
