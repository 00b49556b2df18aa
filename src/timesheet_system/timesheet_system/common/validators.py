from __future__ import annotations

import math
from typing import Any, Optional

from ..core.constants import MAX_HOURS_PER_ENTRY
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_hours(value: Any, field_name: str, *, allow_zero: bool = True) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(hours):
        raise ValidationError(f"{field_name} must be a number")
    if hours < 0 or hours > MAX_HOURS_PER_ENTRY:
        raise ValidationError(f"{field_name} must be between 0 and {MAX_HOURS_PER_ENTRY}")
    # Stored as DECIMAL(5,2).
    hours = round(hours, 2)
    if not allow_zero and hours == 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return hours


def require_period(month: Any, year: Any) -> tuple[int, int]:
    m = require_int(month, "month")
    y = require_int(year, "year")
    if not 1 <= m <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1900 <= y <= 9999:
        raise ValidationError("year is out of range")
    return m, y
