"""
Transaction API
"""
from datetime import date
from fastapi import APIRouter, Depends
from typing import List, Optional

from gamezone.api.deps import get_gateway
from gamezone.core.constants import TRANSACTIONS
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.transaction import TransactionResponse
from gamezone.services.reporting import date_range_bounds

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionResponse])
def get_transactions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    transaction_type: Optional[str] = None,
    payment_method: Optional[str] = None,
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """Payments and refunds, newest first, optionally limited to local dates"""
    since = until = None
    if start_date or end_date:
        since, until = date_range_bounds(start_date or end_date, end_date or start_date)
    filters = {}
    if transaction_type:
        filters["transaction_type"] = transaction_type
    if payment_method:
        filters["payment_method"] = payment_method
    return list(reversed(gateway.list(TRANSACTIONS, filters, since=since, until=until)))
