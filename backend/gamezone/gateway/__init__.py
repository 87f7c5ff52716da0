from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.gateway.memory import InMemoryGateway
from gamezone.gateway.sqlalchemy_gateway import SqlAlchemyGateway

__all__ = ["PersistenceGateway", "Row", "InMemoryGateway", "SqlAlchemyGateway"]
