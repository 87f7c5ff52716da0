"""
Shared API dependencies
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from gamezone.db.database import get_db
from gamezone.gateway import SqlAlchemyGateway


def get_gateway(db: Session = Depends(get_db)) -> SqlAlchemyGateway:
    """Gateway over the request's database session"""
    return SqlAlchemyGateway(db)
