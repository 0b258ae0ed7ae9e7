from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: an account that can belong to many organizations.

    Note: pure data object (no DB access code here).
    """

    user_id: int
    email: str
    full_name: str
    password_hash: str
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserProfile:
    """Public view of a user (no password hash)."""

    user_id: int
    email: str
    full_name: str
