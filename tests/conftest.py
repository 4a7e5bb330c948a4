from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_service.api import routes
from account_service.api.errors import install_error_handlers
from account_service.domain.account import Account, StoredAccount
from account_service.domain.contracts import AccountProfileInput, NewAccount
from account_service.domain.errors import StoreConflictError, StoreError
from account_service.domain.service import AccountService
from account_service.security.passwords import PasswordHasher
from account_service.security.tokens import SigningKey, TokenService

TEST_ISSUER = "accounts.test"


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviors."""

    def __init__(self) -> None:
        self._rows: dict[int, dict] = {}
        self._seq = 0
        self._base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.calls: list[str] = []
        self.list_offsets: list[int] = []
        # simulates a concurrent writer: existence checks miss, the insert still conflicts
        self.hide_existing = False
        self.broken = False

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.broken:
            raise StoreError("connection refused")

    def _live(self):
        return [row for row in self._rows.values() if row["deleted_at"] is None]

    def _conflict(self, username: str, email: str | None, exclude_id: int | None = None) -> None:
        for row in self._live():
            if row["account"].account_id == exclude_id:
                continue
            if row["account"].username == username:
                raise StoreConflictError("username")
            if email and row["account"].email == email:
                raise StoreConflictError("email")

    def create_account(self, new: NewAccount) -> Account:
        self._check("create_account")
        profile = new.profile
        self._conflict(profile.username, profile.normalized_email)
        self._seq += 1
        now = self._base_time + timedelta(seconds=self._seq)
        account = Account(
            account_id=self._seq,
            username=profile.username,
            name=profile.name,
            email=profile.normalized_email,
            phone=profile.phone,
            mobile=profile.mobile,
            image_url=profile.image_url,
            is_active=profile.resolved_active,
            role_id=profile.role_id,
            created_at=now,
            updated_at=now,
        )
        self._rows[account.account_id] = {
            "account": account,
            "password_hash": new.password_hash,
            "deleted_at": None,
        }
        return account

    def get_account(self, account_id: int) -> Account | None:
        self._check("get_account")
        row = self._rows.get(account_id)
        if row is None or row["deleted_at"] is not None:
            return None
        return row["account"]

    def find_by_username(self, username: str) -> StoredAccount | None:
        self._check("find_by_username")
        for row in self._live():
            if row["account"].username == username:
                return StoredAccount(account=row["account"], password_hash=row["password_hash"])
        return None

    def update_account(self, account_id: int, profile: AccountProfileInput) -> Account | None:
        self._check("update_account")
        row = self._rows.get(account_id)
        if row is None or row["deleted_at"] is not None:
            return None
        self._conflict(profile.username, profile.normalized_email, exclude_id=account_id)
        row["account"] = replace(
            row["account"],
            username=profile.username,
            name=profile.name,
            email=profile.normalized_email,
            phone=profile.phone,
            mobile=profile.mobile,
            image_url=profile.image_url,
            is_active=profile.resolved_active,
            role_id=profile.role_id,
            updated_at=row["account"].updated_at + timedelta(minutes=1),
        )
        return row["account"]

    def soft_delete_account(self, account_id: int) -> bool:
        self._check("soft_delete_account")
        row = self._rows.get(account_id)
        if row is None or row["deleted_at"] is not None:
            return False
        row["deleted_at"] = datetime.now(timezone.utc)
        return True

    def list_accounts(self, *, offset: int, limit: int, search: str | None = None):
        self._check("list_accounts")
        self.list_offsets.append(offset)
        accounts = [row["account"] for row in self._live()]
        if search:
            needle = search.lower()
            accounts = [
                account
                for account in accounts
                if needle in account.username.lower()
                or needle in account.name.lower()
                or needle in (account.email or "").lower()
            ]
        accounts.sort(key=lambda a: (a.created_at, a.account_id), reverse=True)
        return accounts[offset : offset + limit], len(accounts)

    def username_exists(self, username: str, exclude_id: int | None = None) -> bool:
        self._check("username_exists")
        if self.hide_existing:
            return False
        return any(
            row["account"].username == username and row["account"].account_id != exclude_id
            for row in self._live()
        )

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        self._check("email_exists")
        if self.hide_existing:
            return False
        return any(
            row["account"].email == email and row["account"].account_id != exclude_id
            for row in self._live()
        )

    def password_hash_for(self, account_id: int) -> str:
        return self._rows[account_id]["password_hash"]


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock) -> TokenService:
    return TokenService(SigningKey(secret="test-secret"), issuer=TEST_ISSUER, clock=clock)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # cheap parameters keep the suite fast
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository, token_service, password_hasher) -> AccountService:
    return AccountService(repository, token_service, password_hasher)


def make_profile(username: str = "john", email: str | None = "john@x.com", **overrides) -> AccountProfileInput:
    fields = {"username": username, "name": "John Doe", "email": email}
    fields.update(overrides)
    return AccountProfileInput(**fields)


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    install_error_handlers(app)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, service
