"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .account import Account, StoredAccount

DEFAULT_ROLE_ID = 1


@dataclass(slots=True)
class AccountProfileInput:
    """Validated mutable profile fields for create and full-replace update.

    ``email`` of ``None`` or ``""`` means the account has no email, and an
    ``is_active`` of ``None`` means the caller left it unset, which resolves
    to active.
    """

    username: str
    name: str
    email: str | None = None
    phone: str = ""
    mobile: str = ""
    image_url: str = ""
    is_active: bool | None = None
    role_id: int = DEFAULT_ROLE_ID

    @property
    def normalized_email(self) -> str | None:
        if self.email is None:
            return None
        email = self.email.strip()
        return email or None

    @property
    def resolved_active(self) -> bool:
        return True if self.is_active is None else self.is_active


@dataclass(slots=True)
class NewAccount:
    """Row payload handed to the store when inserting an account."""

    profile: AccountProfileInput
    password_hash: str


@dataclass(slots=True)
class PaginationInfo:
    current_page: int
    per_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


@dataclass(slots=True)
class AccountPage:
    accounts: list[Account] = field(default_factory=list)
    pagination: PaginationInfo | None = None


class AccountStore(Protocol):
    """Durable account persistence consumed by ``AccountService``.

    Implementations exclude soft-deleted rows from every lookup, raise
    ``StoreConflictError`` when a unique index rejects a write and
    ``StoreError`` for any other backend failure. ``list_accounts`` accepts
    any non-negative ``offset``; one past the match count yields no rows.
    """

    def create_account(self, new: NewAccount) -> Account: ...

    def get_account(self, account_id: int) -> Account | None: ...

    def find_by_username(self, username: str) -> StoredAccount | None: ...

    def update_account(self, account_id: int, profile: AccountProfileInput) -> Account | None: ...

    def soft_delete_account(self, account_id: int) -> bool: ...

    def list_accounts(
        self, *, offset: int, limit: int, search: str | None = None
    ) -> tuple[list[Account], int]: ...

    def username_exists(self, username: str, exclude_id: int | None = None) -> bool: ...

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool: ...
