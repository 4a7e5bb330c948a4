"""Account service orchestrating persistence, password hashing, and token issuance."""

from __future__ import annotations

import logging
import math

from .account import Account
from .contracts import (
    AccountPage,
    AccountProfileInput,
    AccountStore,
    NewAccount,
    PaginationInfo,
)
from .errors import (
    AccountNotFoundError,
    EmailTakenError,
    InternalError,
    InvalidCredentialError,
    LoginFailedError,
    StoreConflictError,
    StoreError,
    UsernameTakenError,
)
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenService

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def normalize_page(page: int | None) -> int:
    if page is None or page < 1:
        return DEFAULT_PAGE
    return page


def normalize_limit(limit: int | None) -> int:
    if limit is None or limit < 1 or limit > MAX_LIMIT:
        return DEFAULT_LIMIT
    return limit


def build_pagination(page: int, limit: int, total: int) -> PaginationInfo:
    """Compute page metadata; pages past the end report the last page."""
    total_pages = math.ceil(total / limit) if total > 0 else 0
    current_page = min(page, max(total_pages, 1))
    return PaginationInfo(
        current_page=current_page,
        per_page=limit,
        total_pages=total_pages,
        total_count=total,
        has_next=current_page < total_pages,
        has_prev=current_page > 1,
    )


class AccountService:
    """Account workflows backed by the account store."""

    def __init__(
        self,
        repository: AccountStore,
        tokens: TokenService,
        passwords: PasswordHasher,
    ) -> None:
        """Store dependencies used to orchestrate persistence and token issuance."""
        self._repository = repository
        self._tokens = tokens
        self._passwords = passwords

    def register(self, profile: AccountProfileInput, secret: str) -> str:
        """Create an account and return a token bound to it."""
        account = self._create(profile, secret)
        logger.info("account %s registered", account.account_id)
        return self._tokens.issue(account.account_id)

    def login(self, username: str, secret: str) -> str:
        """Return a fresh token when ``username``/``secret`` match a live account."""
        stored = self._store_call(self._repository.find_by_username, username)
        if stored is None or not self._passwords.verify(stored.password_hash, secret):
            logger.warning("failed login for username %r", username)
            raise LoginFailedError("invalid username or password")
        logger.info("account %s logged in", stored.account.account_id)
        return self._tokens.issue(stored.account.account_id)

    def get_profile(self, token: str) -> Account:
        """Return the account the token is bound to."""
        return self._authenticate(token)

    def get_user(self, token: str, account_id: int) -> Account:
        """Return any live account to a caller holding a valid token."""
        self._authenticate(token)
        return self._require_account(account_id)

    def create_user(self, token: str, profile: AccountProfileInput, secret: str) -> Account:
        """Create an account on behalf of an authenticated caller."""
        caller = self._authenticate(token)
        account = self._create(profile, secret)
        logger.info("account %s created by %s", account.account_id, caller.account_id)
        return account

    def update_user(self, token: str, account_id: int, profile: AccountProfileInput) -> Account:
        """Replace every mutable profile field of ``account_id``.

        Fields absent from ``profile`` are not merged with the stored values;
        callers resend the complete profile.
        """
        caller = self._authenticate(token)
        existing = self._require_account(account_id)

        if profile.username != existing.username and self._store_call(
            self._repository.username_exists, profile.username, existing.account_id
        ):
            raise UsernameTakenError("username already exists")

        email = profile.normalized_email
        if email and email != existing.email and self._store_call(
            self._repository.email_exists, email, existing.account_id
        ):
            raise EmailTakenError("email already exists")

        try:
            updated = self._store_call(self._repository.update_account, account_id, profile)
        except StoreConflictError as exc:
            raise self._conflict_error(exc) from exc
        if updated is None:
            raise AccountNotFoundError("account not found")
        logger.info("account %s updated by %s", account_id, caller.account_id)
        return updated

    def delete_user(self, token: str, account_id: int) -> None:
        """Soft-delete a live account; repeated deletes report not found."""
        caller = self._authenticate(token)
        self._require_account(account_id)
        if not self._store_call(self._repository.soft_delete_account, account_id):
            raise AccountNotFoundError("account not found")
        logger.info("account %s deleted by %s", account_id, caller.account_id)

    def list_users(
        self,
        token: str,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
    ) -> AccountPage:
        """Return a page of live accounts, newest first, optionally filtered by ``search``."""
        self._authenticate(token)
        page = normalize_page(page)
        limit = normalize_limit(limit)
        term = (search or "").strip() or None

        accounts, total = self._store_call(
            self._repository.list_accounts,
            offset=(page - 1) * limit,
            limit=limit,
            search=term,
        )
        pagination = build_pagination(page, limit, total)
        if page > pagination.current_page:
            accounts = []
        return AccountPage(accounts=accounts, pagination=pagination)

    def _create(self, profile: AccountProfileInput, secret: str) -> Account:
        if self._store_call(self._repository.username_exists, profile.username):
            raise UsernameTakenError("username already exists")
        email = profile.normalized_email
        if email and self._store_call(self._repository.email_exists, email):
            raise EmailTakenError("email already exists")

        password_hash = self._passwords.hash(secret)
        try:
            return self._store_call(
                self._repository.create_account,
                NewAccount(profile=profile, password_hash=password_hash),
            )
        except StoreConflictError as exc:
            # a concurrent writer won the race past the pre-check
            raise self._conflict_error(exc) from exc

    def _authenticate(self, token: str) -> Account:
        account_id = self._tokens.validate(token)
        account = self._store_call(self._repository.get_account, account_id)
        if account is None:
            raise InvalidCredentialError("token account unavailable")
        return account

    def _require_account(self, account_id: int) -> Account:
        account = self._store_call(self._repository.get_account, account_id)
        if account is None:
            raise AccountNotFoundError("account not found")
        return account

    def _store_call(self, func, *args, **kwargs):
        """Invoke a store operation, surfacing backend failures as ``InternalError``.

        Conflicts pass through untouched so callers can map them to the
        field that collided.
        """
        try:
            return func(*args, **kwargs)
        except StoreConflictError:
            raise
        except StoreError as exc:
            logger.exception("account store failure")
            raise InternalError("account store failure") from exc

    @staticmethod
    def _conflict_error(exc: StoreConflictError) -> UsernameTakenError | EmailTakenError:
        if exc.field == "email":
            return EmailTakenError("email already exists")
        return UsernameTakenError("username already exists")
