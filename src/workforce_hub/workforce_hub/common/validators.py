from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_int_range(value, field_name: str, *, min_value: int, max_value: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number < min_value or number > max_value:
        raise ValidationError(f"{field_name} must be between {min_value} and {max_value}")
    return number


def normalize_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "Email").lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or "." not in domain:
        raise ValidationError("Email is not valid")
    return email


def optional_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None
