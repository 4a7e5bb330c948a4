from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Aggregate root for a registered user identity. Never carries the password."""

    account_id: int
    username: str
    name: str
    email: str | None
    phone: str
    mobile: str
    image_url: str
    is_active: bool
    role_id: int
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class StoredAccount:
    """Account together with its password hash, used only by the login path."""

    account: Account
    password_hash: str
