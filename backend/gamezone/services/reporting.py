"""
Reporting

Read-only revenue summaries over transactions. Periods start at local
midnight (daily), the most recent Sunday (weekly), the 1st of the month
(monthly), the 1st of the month three or six months back (quarterly,
half-yearly) or January 1st (yearly), and run until now.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from gamezone.core.constants import ORDERS, ORDER_TYPES, PAYMENT_METHODS, REPORT_PERIODS, TRANSACTIONS
from gamezone.core.exceptions import ValidationError
from gamezone.gateway.base import PersistenceGateway, Row
from gamezone.utils.money import money_sum, to_decimal, to_money
from gamezone.utils.time_utils import LOCAL_TZ, ensure_utc, local_now, utcnow


def _months_back(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) - months
    return index // 12, index % 12 + 1


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """Start of the reporting period as a UTC instant"""
    local = local_now(now)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "daily":
        start = midnight
    elif period == "weekly":
        # isoweekday: Monday=1 .. Sunday=7
        start = midnight - timedelta(days=local.isoweekday() % 7)
    elif period == "monthly":
        start = midnight.replace(day=1)
    elif period in ("quarterly", "half-yearly"):
        year, month = _months_back(local.year, local.month, 3 if period == "quarterly" else 6)
        start = midnight.replace(year=year, month=month, day=1)
    elif period == "yearly":
        start = midnight.replace(month=1, day=1)
    else:
        raise ValidationError(f"Period must be one of {', '.join(REPORT_PERIODS)}")
    return ensure_utc(start)


def period_bounds(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = ensure_utc(now or utcnow())
    return period_start(period, now), now


def date_range_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """Whole local days from start_date through end_date"""
    if end_date < start_date:
        raise ValidationError("End date cannot be before start date")
    start = datetime.combine(start_date, datetime.min.time(), tzinfo=LOCAL_TZ)
    end = datetime.combine(end_date + timedelta(days=1), datetime.min.time(), tzinfo=LOCAL_TZ)
    return ensure_utc(start), ensure_utc(end)


@dataclass
class ReportSummary:
    start: datetime
    end: datetime
    period: Optional[str] = None
    total_revenue: Decimal = Decimal("0.00")
    payment_count: int = 0
    revenue_by_order_type: Dict[str, Decimal] = field(default_factory=dict)
    revenue_by_payment_method: Dict[str, Decimal] = field(default_factory=dict)
    revenue_by_day: Dict[str, Decimal] = field(default_factory=dict)
    refund_total: Decimal = Decimal("0.00")
    net_revenue: Decimal = Decimal("0.00")
    transactions: List[Row] = field(default_factory=list)


def summarize(
    store: PersistenceGateway,
    period: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ReportSummary:
    """Revenue over a named period, or over [start, end)"""
    if period is not None:
        start, end = period_bounds(period, now)
        # Named periods run up to now, inclusive
        transactions = store.list(TRANSACTIONS, since=start)
    elif start is None or end is None:
        raise ValidationError("Give a period or both start and end")
    else:
        transactions = store.list(TRANSACTIONS, since=start, until=end)

    order_types = {}
    for order_id in {t["order_id"] for t in transactions}:
        order = store.get(ORDERS, order_id)
        order_types[order_id] = order["order_type"] if order else None

    by_type = {order_type: Decimal("0") for order_type in ORDER_TYPES}
    by_method = {method: Decimal("0") for method in PAYMENT_METHODS}
    by_day: Dict[str, Decimal] = {}
    payments, refunds, rows = [], [], []

    for transaction in transactions:
        amount = to_decimal(transaction["amount"])
        order_type = order_types.get(transaction["order_id"])
        rows.append(dict(transaction, order_type=order_type))
        if transaction["transaction_type"] == "refund":
            refunds.append(amount)
            continue
        payments.append(amount)
        if order_type in by_type:
            by_type[order_type] += amount
        method = transaction["payment_method"]
        by_method[method] = by_method.get(method, Decimal("0")) + amount
        day = ensure_utc(transaction["created_at"]).astimezone(LOCAL_TZ).date().isoformat()
        by_day[day] = by_day.get(day, Decimal("0")) + amount

    total = money_sum(payments)
    refunded = money_sum(refunds)
    return ReportSummary(
        start=start,
        end=end,
        period=period,
        total_revenue=total,
        payment_count=len(payments),
        revenue_by_order_type={k: to_money(v) for k, v in by_type.items()},
        revenue_by_payment_method={k: to_money(v) for k, v in by_method.items()},
        revenue_by_day={k: to_money(v) for k, v in sorted(by_day.items())},
        refund_total=refunded,
        net_revenue=to_money(total - refunded),
        transactions=rows,
    )
