"""
Operation log schemas
"""
from pydantic import BaseModel, field_serializer
from typing import Optional
from datetime import datetime

from gamezone.utils.time_utils import format_datetime_local


class OperationLogResponse(BaseModel):
    """Operation log entry"""
    id: int
    username: str
    action: str
    module: str
    method: str
    path: str
    ip_address: Optional[str] = None
    request_data: Optional[str] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    execution_time: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime_local(dt)
