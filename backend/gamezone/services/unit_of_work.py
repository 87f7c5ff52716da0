"""
Unit of work

Groups the writes of one logical operation (room + order + items +
transaction). On a transactional gateway the writes share one database
transaction. Otherwise every write records a compensating action, and on
failure those run in reverse order. When a compensation fails too, the
caller gets a PersistenceError with `partially_applied=True`.
"""
from functools import partial
from typing import Callable, List, Tuple

from gamezone.core.exceptions import PersistenceError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.utils.logging_utils import get_logger

logger = get_logger("uow")


class UnitOfWork(PersistenceGateway):
    """Gateway proxy used as `with UnitOfWork(gateway, "stop session") as uow:`"""

    def __init__(self, gateway: PersistenceGateway, name: str = "operation"):
        self.gateway = gateway
        self.name = name
        self._undo: List[Tuple[str, Callable[[], object]]] = []
        self._active = False

    @property
    def supports_transactions(self) -> bool:
        return self.gateway.supports_transactions

    def __enter__(self) -> "UnitOfWork":
        if self._active:
            raise RuntimeError(f"unit of work '{self.name}' is already open")
        self._active = True
        self._undo = []
        if self.gateway.supports_transactions:
            self.gateway.begin()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._active = False
        if exc_type is None:
            if self.gateway.supports_transactions:
                self.gateway.commit()
            self._undo = []
            return False

        if self.gateway.supports_transactions:
            self.gateway.rollback()
            logger.warning("%s rolled back: %s", self.name, exc)
            return False

        self._compensate(exc)
        return False

    def _compensate(self, exc: BaseException) -> None:
        if not self._undo:
            return
        failures = []
        for description, action in reversed(self._undo):
            try:
                action()
            except Exception as e:
                logger.error("%s: could not undo %s: %s", self.name, description, e)
                failures.append(description)
        undone = len(self._undo) - len(failures)
        self._undo = []
        if failures:
            raise PersistenceError(
                f"{self.name} failed ({exc}) and {len(failures)} write(s) could not be undone: "
                + ", ".join(failures),
                partially_applied=True,
            ) from exc
        logger.warning("%s failed, %d write(s) undone: %s", self.name, undone, exc)

    # Reads pass straight through

    def list(self, entity, filters=None, since=None, until=None):
        return self.gateway.list(entity, filters, since=since, until=until)

    def get(self, entity, id):
        return self.gateway.get(entity, id)

    # Writes record how to undo themselves

    def create(self, entity, fields) -> Row:
        row = self.gateway.create(entity, fields)
        self._undo.append((f"create {entity} {row['id']}", partial(self.gateway.delete, entity, row["id"])))
        return row

    def update(self, entity, id, fields) -> Row:
        before = self.gateway.get(entity, id)
        row = self.gateway.update(entity, id, fields)
        if before is not None:
            restore = {key: before.get(key) for key in fields if key in before}
            self._undo.append((f"update {entity} {id}", partial(self.gateway.update, entity, id, restore)))
        return row

    def delete(self, entity, id) -> None:
        before = self.gateway.get(entity, id)
        self.gateway.delete(entity, id)
        if before is not None:
            self._undo.append((f"delete {entity} {id}", partial(self.gateway.create, entity, before)))
