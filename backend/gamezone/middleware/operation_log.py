"""
Operation log middleware
Records every mutating API request
"""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from gamezone.db.database import SessionLocal
from gamezone.models.operation_log import OperationLog
from gamezone.utils.logging_utils import get_logger

logger = get_logger("operations")


class OperationLogMiddleware(BaseHTTPMiddleware):
    """Operation log middleware"""

    LOGGED_METHODS = ("POST", "PUT", "PATCH", "DELETE")

    # Paths that are never logged
    EXCLUDED_PREFIXES = (
        "/docs",
        "/redoc",
        "/openapi.json",
        "/api/operation-logs",
    )

    # Module by path prefix
    MODULE_MAP = {
        "/api/rooms": "rooms",
        "/api/orders": "orders",
        "/api/cafe-products": "cafe",
        "/api/appointments": "appointments",
        "/api/transactions": "transactions",
        "/api/reports": "reports",
    }

    ACTION_MAP = {
        "POST": "create",
        "PUT": "update",
        "PATCH": "update",
        "DELETE": "delete",
    }

    # More specific actions by path fragment
    PATH_ACTIONS = (
        ("/start-session", "start session"),
        ("/stop-session", "stop session"),
        ("/adjust-time", "adjust time"),
        ("/extend-time", "extend time"),
        ("/reactivate", "reactivate session"),
        ("/complete-payment", "complete payment"),
        ("/cancel", "cancel order"),
        ("/refund", "refund"),
        ("/cafe-items", "add cafe items"),
        ("/orders/cafe", "cafe order"),
        ("/stock", "adjust stock"),
        ("/status", "change status"),
        ("/check-conflict", "check conflict"),
    )

    def _session_factory(self, request: Request):
        return getattr(request.app.state, "session_factory", SessionLocal)

    def _action(self, method: str, path: str) -> str:
        for fragment, action in self.PATH_ACTIONS:
            if fragment in path:
                return action
        return self.ACTION_MAP.get(method, method)

    def _module(self, path: str) -> str:
        for prefix, module in self.MODULE_MAP.items():
            if path.startswith(prefix):
                return module
        return "other"

    async def dispatch(self, request: Request, call_next):
        """Handle the request and record it"""
        method = request.method
        path = request.url.path
        if method not in self.LOGGED_METHODS or path.startswith(self.EXCLUDED_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        body = await request.body()
        request_data = body.decode("utf-8", errors="replace")[:2000] if body else None

        response = await call_next(request)

        execution_time = int((time.time() - start_time) * 1000)
        status_code = response.status_code
        error_message = f"HTTP {status_code}" if status_code >= 400 else None
        action = self._action(method, path)
        module = self._module(path)

        logger.info("%s %s -> %s (%s/%s, %dms)", method, path, status_code, module, action, execution_time)

        db = self._session_factory(request)()
        try:
            db.add(OperationLog(
                username=request.headers.get("x-username") or "cashier",
                action=action,
                module=module,
                method=method,
                path=path,
                ip_address=request.client.host if request.client else None,
                request_data=request_data,
                status_code=status_code,
                error_message=error_message,
                execution_time=execution_time,
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Could not record operation log for %s %s: %s", method, path, e)
        finally:
            db.close()

        return response
