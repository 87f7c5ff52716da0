"""
Reports API
"""
from dataclasses import asdict
from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Optional

from gamezone.api.deps import get_gateway
from gamezone.config import CURRENCY
from gamezone.core.exceptions import ValidationError
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.report import ReportResponse
from gamezone.services.reporting import date_range_bounds, summarize

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/summary", response_model=ReportResponse)
def get_summary(
    period: Optional[str] = Query(None, description="daily, weekly, monthly, quarterly, half-yearly or yearly"),
    start_date: Optional[date] = Query(None, description="Start date, YYYY-MM-DD"),
    end_date: Optional[date] = Query(None, description="End date, YYYY-MM-DD"),
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """Revenue summary for a period or a date range"""
    if period:
        summary = summarize(gateway, period=period)
    elif start_date and end_date:
        start, end = date_range_bounds(start_date, end_date)
        summary = summarize(gateway, start=start, end=end)
    else:
        raise ValidationError("Give a period or both start_date and end_date")
    return dict(asdict(summary), currency=CURRENCY)
