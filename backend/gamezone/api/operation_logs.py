"""
Operation log API
"""
from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session
from typing import List, Optional

from gamezone.core.exceptions import NotFoundError
from gamezone.db.database import get_db
from gamezone.models.operation_log import OperationLog
from gamezone.schemas.operation_log import OperationLogResponse
from gamezone.services.reporting import date_range_bounds
from gamezone.utils.time_utils import utcnow

router = APIRouter(prefix="/api/operation-logs", tags=["Operation logs"])


@router.get("", response_model=List[OperationLogResponse])
def get_operation_logs(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=1000, description="Records to return"),
    action: Optional[str] = Query(None, description="Action filter"),
    module: Optional[str] = Query(None, description="Module filter"),
    start_date: Optional[date] = Query(None, description="Start date"),
    end_date: Optional[date] = Query(None, description="End date"),
    db: Session = Depends(get_db)
):
    """List operation logs, newest first"""
    query = db.query(OperationLog)

    if action:
        query = query.filter(OperationLog.action.like(f"%{action}%"))

    if module:
        query = query.filter(OperationLog.module.like(f"%{module}%"))

    if start_date or end_date:
        since, until = date_range_bounds(start_date or end_date, end_date or start_date)
        query = query.filter(OperationLog.created_at >= since, OperationLog.created_at < until)

    return query.order_by(desc(OperationLog.id)).offset(skip).limit(limit).all()


@router.get("/{log_id}", response_model=OperationLogResponse)
def get_operation_log(log_id: int, db: Session = Depends(get_db)):
    """Operation log detail"""
    log = db.query(OperationLog).filter(OperationLog.id == log_id).first()
    if not log:
        raise NotFoundError(f"Operation log {log_id} not found")
    return log


@router.delete("")
def clear_operation_logs(
    days: int = Query(30, ge=1, le=365, description="Keep the last N days"),
    db: Session = Depends(get_db)
):
    """Delete logs older than N days"""
    cutoff = utcnow() - timedelta(days=days)
    deleted_count = db.query(OperationLog).filter(OperationLog.created_at < cutoff).delete()
    db.commit()
    return {"message": f"Deleted {deleted_count} operation log(s)"}
