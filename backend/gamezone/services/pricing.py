"""
Room pricing and line naming
"""
from decimal import Decimal
from typing import Optional

from gamezone.config import MIN_SESSION_HOURS, MAX_SESSION_HOURS
from gamezone.core.constants import GAME_MODES, PAYMENT_METHODS
from gamezone.core.exceptions import ValidationError
from gamezone.gateway.base import Row
from gamezone.utils.money import to_decimal, to_money


def check_mode(mode: Optional[str]) -> str:
    if mode not in GAME_MODES:
        raise ValidationError(f"Mode must be one of {', '.join(GAME_MODES)}")
    return mode


def check_payment_method(method: Optional[str]) -> str:
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")
    return method


def check_customer_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Customer name is required")
    return name


def check_duration(hours) -> Optional[Decimal]:
    """None means open time; otherwise a positive number of hours within the session limits"""
    if hours is None:
        return None
    hours = to_decimal(hours)
    if hours <= 0:
        raise ValidationError("Duration must be positive")
    if hours < MIN_SESSION_HOURS or hours > MAX_SESSION_HOURS:
        raise ValidationError(
            f"Duration must be between {MIN_SESSION_HOURS} and {MAX_SESSION_HOURS} hours"
        )
    return hours


def hourly_rate(room: Row, mode: str) -> Decimal:
    check_mode(mode)
    rate = room["pricing_single"] if mode == "single" else room["pricing_multiplayer"]
    return to_money(rate)


def duration_label(hours: Optional[Decimal], signed: bool = False) -> str:
    if hours is None:
        return "Open time"
    hours = to_decimal(hours).normalize()
    sign = "+" if signed and hours > 0 else ""
    return f"{sign}{hours:f}h"


def room_time_name(room: Row, mode: str, hours: Optional[Decimal], note: str = "", signed: bool = False) -> str:
    mode_label = "Single" if mode == "single" else "Multiplayer"
    name = f"{room['name']} - {mode_label} - {duration_label(hours, signed)}"
    if note:
        name += f" ({note})"
    return name
