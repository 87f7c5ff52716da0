"""
Application configuration (environment variables with defaults)
"""
import os
from decimal import Decimal

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gaming_center.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")  # unset -> stderr

# Business settings
APP_NAME = os.getenv("APP_NAME", "Zone 14 Gaming Center")
APP_VERSION = "1.0.0"
CURRENCY = os.getenv("CURRENCY", "EGP")
# Wall-clock offset for appointments and displayed times (Cairo, no DST)
UTC_OFFSET_HOURS = int(os.getenv("UTC_OFFSET_HOURS", "2"))

MIN_SESSION_HOURS = Decimal(os.getenv("MIN_SESSION_HOURS", "0.5"))
MAX_SESSION_HOURS = Decimal(os.getenv("MAX_SESSION_HOURS", "12"))
APPOINTMENT_REMINDER_MINUTES = int(os.getenv("APPOINTMENT_REMINDER_MINUTES", "15"))

# Default hourly pricing for new rooms (can be overridden per room)
DEFAULT_PRICING = {
    "PS5": {"single": Decimal("25.00"), "multiplayer": Decimal("35.00")},
    "Xbox": {"single": Decimal("20.00"), "multiplayer": Decimal("30.00")},
}
