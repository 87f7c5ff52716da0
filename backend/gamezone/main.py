"""
FastAPI application entry point
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import traceback

from gamezone.config import APP_NAME, APP_VERSION, CURRENCY
from gamezone.core.exceptions import GameZoneError, PersistenceError
from gamezone.db.database import engine, Base, SessionLocal
from gamezone.middleware.operation_log import OperationLogMiddleware
from gamezone.utils.logging_utils import get_logger, log_event

# Import all models so their tables are created
from gamezone.models import (
    Room, Order, OrderItem, Transaction, Appointment, CafeProduct, OperationLog
)

logger = get_logger("app")

# Create database tables
Base.metadata.create_all(bind=engine)

# Create the FastAPI application
app = FastAPI(
    title=f"{APP_NAME} API",
    description="Gaming center point-of-sale backend: rooms, sessions, cafe orders, appointments and reports",
    version=APP_VERSION
)
app.state.session_factory = SessionLocal

app.add_middleware(OperationLogMiddleware)

# CORS (the cashier UI runs on another origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}


@app.exception_handler(GameZoneError)
async def domain_exception_handler(request: Request, exc: GameZoneError):
    """Domain errors map to their HTTP status with a retry hint"""
    if isinstance(exc, PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=CORS_HEADERS)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors still return JSON with CORS headers"""
    traceback_str = traceback.format_exc()
    logger.error("Unhandled exception on %s %s: %s\n%s", request.method, request.url.path, exc, traceback_str)
    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {exc}",
            "error": "internal_error",
            "safe_to_retry": False,
            "traceback": traceback_str if app.debug else None
        },
        headers=CORS_HEADERS
    )


@app.get("/")
async def root():
    """Root"""
    return {"message": f"{APP_NAME} API", "version": APP_VERSION, "currency": CURRENCY}


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "ok"}


# Register API routers
from gamezone.api import rooms, orders, cafe_products, appointments, transactions, reports, operation_logs
app.include_router(rooms.router)
app.include_router(orders.router)
app.include_router(cafe_products.router)
app.include_router(appointments.router)
app.include_router(transactions.router)
app.include_router(reports.router)
app.include_router(operation_logs.router)

log_event("app", "started", f"{APP_NAME} {APP_VERSION}")
