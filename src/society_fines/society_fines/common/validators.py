from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_list(value: Any, field_name: str) -> list:
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be an array")
    return value


def require_positive_amount(value: Any, field_name: str) -> int:
    try:
        amount = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return amount
