"""Request and response envelopes for the account API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..domain.account import Account
from ..domain.contracts import DEFAULT_ROLE_ID, AccountProfileInput, PaginationInfo
from .responses import ResponseCode


class AccountView(BaseModel):
    """Serialised representation of an `Account` aggregate; never includes the password."""

    id: int
    username: str
    name: str
    email: str
    phone: str
    mobile: str
    is_active: bool
    role_id: int
    image_url: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountView":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.account_id,
            username=account.username,
            name=account.name,
            email=account.email or "",
            phone=account.phone,
            mobile=account.mobile,
            is_active=account.is_active,
            role_id=account.role_id,
            image_url=account.image_url,
            created_at=account.created_at.isoformat(),
            updated_at=account.updated_at.isoformat(),
        )


class PaginationView(BaseModel):
    current_page: int
    per_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_domain(cls, info: PaginationInfo) -> "PaginationView":
        return cls(
            current_page=info.current_page,
            per_page=info.per_page,
            total_pages=info.total_pages,
            total_count=info.total_count,
            has_next=info.has_next,
            has_prev=info.has_prev,
        )


class ProfileFields(BaseModel):
    """Mutable profile fields; presence and format are checked by the handler."""

    username: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str = ""
    mobile: str = ""
    image_url: str = ""
    is_active: bool | None = None
    role_id: int | None = None

    def to_input(self) -> AccountProfileInput:
        return AccountProfileInput(
            username=(self.username or "").strip(),
            name=(self.name or "").strip(),
            email=self.email.strip() if self.email else None,
            phone=self.phone,
            mobile=self.mobile,
            image_url=self.image_url,
            is_active=self.is_active,
            role_id=DEFAULT_ROLE_ID if self.role_id is None else self.role_id,
        )


class RegisterRequest(ProfileFields):
    """Payload accepted by registration and authenticated account creation."""

    password: str | None = None


class UpdateUserRequest(ProfileFields):
    """Full replacement of the mutable profile; the password is not updatable here."""


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class Envelope(BaseModel):
    success: bool = True
    code: ResponseCode = ResponseCode.SUCCESS
    message: str


class AuthResponse(Envelope):
    token: str


class AccountResponse(Envelope):
    data: AccountView


class AccountListResponse(Envelope):
    data: list[AccountView] = Field(default_factory=list)
    pagination: PaginationView


class ErrorResponse(Envelope):
    success: bool = False
