"""HTTP route definitions for the account service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Request, status

from ..domain.service import AccountService
from . import responses as msg
from .schemas import (
    AccountListResponse,
    AccountResponse,
    AccountView,
    AuthResponse,
    Envelope,
    LoginRequest,
    PaginationView,
    RegisterRequest,
    UpdateUserRequest,
)
from .validation import (
    require_token,
    validate_login,
    validate_new_account,
    validate_profile_update,
    validate_user_id,
)

router = APIRouter(prefix="/v1")


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Resolve the bearer token from the ``Authorization`` header."""
    return require_token(authorization)


@router.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    service: AccountService = Depends(get_service),
) -> AuthResponse:
    """Register a new account and return a bearer token for it."""
    validate_new_account(
        username=payload.username,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role_id=payload.role_id,
        phone=payload.phone,
        mobile=payload.mobile,
        image_url=payload.image_url,
    )
    token = service.register(payload.to_input(), payload.password)
    return AuthResponse(message=msg.MSG_USER_REGISTERED, token=token)


@router.post("/auth/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_service),
) -> AuthResponse:
    """Exchange a username and password for a bearer token."""
    validate_login(payload.username, payload.password)
    token = service.login(payload.username, payload.password)
    return AuthResponse(message=msg.MSG_USER_LOGGED_IN, token=token)


@router.get("/profile", response_model=AccountResponse)
def get_profile(
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Return the account the bearer token belongs to."""
    account = service.get_profile(token)
    return AccountResponse(message=msg.MSG_PROFILE_RETRIEVED, data=AccountView.from_domain(account))


@router.get("/users", response_model=AccountListResponse)
def list_users(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    search: str = Query(default=""),
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> AccountListResponse:
    """Return a page of accounts, newest first, with optional substring search."""
    result = service.list_users(token, page=page, limit=limit, search=search)
    return AccountListResponse(
        message=msg.MSG_USER_LIST_RETRIEVED,
        data=[AccountView.from_domain(account) for account in result.accounts],
        pagination=PaginationView.from_domain(result.pagination),
    )


@router.get("/users/{user_id}", response_model=AccountResponse)
def get_user(
    user_id: int,
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    account = service.get_user(token, validate_user_id(user_id))
    return AccountResponse(message=msg.MSG_USER_RETRIEVED, data=AccountView.from_domain(account))


@router.post("/users", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: RegisterRequest,
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Create an account on behalf of an authenticated caller."""
    validate_new_account(
        username=payload.username,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role_id=payload.role_id,
        phone=payload.phone,
        mobile=payload.mobile,
        image_url=payload.image_url,
    )
    account = service.create_user(token, payload.to_input(), payload.password)
    return AccountResponse(message=msg.MSG_USER_CREATED, data=AccountView.from_domain(account))


@router.put("/users/{user_id}", response_model=AccountResponse)
def update_user(
    user_id: int,
    payload: UpdateUserRequest,
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Replace the full mutable profile of an account."""
    validate_user_id(user_id)
    validate_profile_update(
        username=payload.username,
        name=payload.name,
        email=payload.email,
        role_id=payload.role_id,
        phone=payload.phone,
        mobile=payload.mobile,
        image_url=payload.image_url,
    )
    account = service.update_user(token, user_id, payload.to_input())
    return AccountResponse(message=msg.MSG_USER_UPDATED, data=AccountView.from_domain(account))


@router.delete("/users/{user_id}", response_model=Envelope)
def delete_user(
    user_id: int,
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_service),
) -> Envelope:
    service.delete_user(token, validate_user_id(user_id))
    return Envelope(message=msg.MSG_USER_DELETED)
