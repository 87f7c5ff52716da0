"""
Persistence gateway contract

Table-style access to the six entities. Rows are plain dicts keyed by column
name. Each call is atomic on its own; `begin`/`commit`/`rollback` are only
meaningful when `supports_transactions` is true.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

Row = Dict[str, Any]


class PersistenceGateway(ABC):
    """CRUD over rooms, orders, order_items, transactions, appointments, cafe_products"""

    supports_transactions = False

    @abstractmethod
    def list(
        self,
        entity: str,
        filters: Optional[Dict[str, Any]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Row]:
        """Rows matching every filter (a list/tuple value means "one of"), ordered by id.

        `since` (inclusive) and `until` (exclusive) bound `created_at`.
        """

    @abstractmethod
    def get(self, entity: str, id: int) -> Optional[Row]:
        ...

    @abstractmethod
    def create(self, entity: str, fields: Row) -> Row:
        ...

    @abstractmethod
    def update(self, entity: str, id: int, fields: Row) -> Row:
        ...

    @abstractmethod
    def delete(self, entity: str, id: int) -> None:
        ...

    def begin(self) -> None:
        pass

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass
