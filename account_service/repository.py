"""Database repository for account data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from psycopg import errors as pg_errors
from psycopg import Error as PsycopgError
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, StoredAccount
from .domain.contracts import AccountProfileInput, NewAccount
from .domain.errors import StoreConflictError, StoreError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
    username VARCHAR(30) NOT NULL,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(100),
    phone VARCHAR(20) NOT NULL DEFAULT '',
    mobile VARCHAR(20) NOT NULL DEFAULT '',
    image_url VARCHAR(255) NOT NULL DEFAULT '',
    password_hash VARCHAR(255) NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    role_id INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    deleted_at TIMESTAMPTZ
);
CREATE UNIQUE INDEX IF NOT EXISTS accounts_username_live_key
    ON accounts (username) WHERE deleted_at IS NULL;
CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_live_key
    ON accounts (email) WHERE deleted_at IS NULL AND email IS NOT NULL;
CREATE INDEX IF NOT EXISTS accounts_created_at_idx
    ON accounts (created_at DESC) WHERE deleted_at IS NULL;
"""

_CONSTRAINT_FIELDS = {
    "accounts_username_live_key": "username",
    "accounts_email_live_key": "email",
}

_ACCOUNT_COLUMNS = (
    "account_id, username, name, email, phone, mobile, image_url, "
    "is_active, role_id, created_at, updated_at"
)


@dataclass(slots=True)
class AccountRecord:
    """Row projection used when mapping database tuples to domain aggregates."""

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

    def to_domain(self) -> Account:
        return Account(
            account_id=self.account_id,
            username=self.username,
            name=self.name,
            email=self.email,
            phone=self.phone,
            mobile=self.mobile,
            image_url=self.image_url,
            is_active=self.is_active,
            role_id=self.role_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def ensure_schema(pool: ConnectionPool) -> None:
    """Create the accounts table and its partial unique indexes if missing."""
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
    logger.info("account schema ensured")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally inside ``%...%``."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class AccountRepository:
    """Postgres-backed account persistence with soft deletion."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def create_account(self, new: NewAccount) -> Account:
        """Insert a live account row and return it with store-assigned fields."""
        profile = new.profile
        now = datetime.now(timezone.utc)
        row = self._fetch_one(
            f"""
            INSERT INTO accounts (
                username, name, email, phone, mobile, image_url,
                password_hash, is_active, role_id, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (
                profile.username,
                profile.name,
                profile.normalized_email,
                profile.phone,
                profile.mobile,
                profile.image_url,
                new.password_hash,
                profile.resolved_active,
                profile.role_id,
                now,
                now,
            ),
            commit=True,
        )
        return self._map_record(row)

    def get_account(self, account_id: int) -> Account | None:
        """Fetch a live account or return ``None``."""
        row = self._fetch_one(
            f"""
            SELECT {_ACCOUNT_COLUMNS}
            FROM accounts
            WHERE account_id = %s AND deleted_at IS NULL
            """,
            (account_id,),
        )
        if not row:
            return None
        return self._map_record(row)

    def find_by_username(self, username: str) -> StoredAccount | None:
        """Return a live account and its password hash for ``username``."""
        row = self._fetch_one(
            f"""
            SELECT {_ACCOUNT_COLUMNS}, password_hash
            FROM accounts
            WHERE username = %s AND deleted_at IS NULL
            """,
            (username,),
        )
        if not row:
            return None
        return StoredAccount(account=self._map_record(row[:-1]), password_hash=row[-1])

    def update_account(self, account_id: int, profile: AccountProfileInput) -> Account | None:
        """Overwrite every mutable profile column of a live account."""
        row = self._fetch_one(
            f"""
            UPDATE accounts
            SET username = %s, name = %s, email = %s, phone = %s, mobile = %s,
                image_url = %s, is_active = %s, role_id = %s, updated_at = %s
            WHERE account_id = %s AND deleted_at IS NULL
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (
                profile.username,
                profile.name,
                profile.normalized_email,
                profile.phone,
                profile.mobile,
                profile.image_url,
                profile.resolved_active,
                profile.role_id,
                datetime.now(timezone.utc),
                account_id,
            ),
            commit=True,
        )
        if not row:
            return None
        return self._map_record(row)

    def soft_delete_account(self, account_id: int) -> bool:
        """Mark a live account as deleted; return ``False`` when nothing matched."""
        row = self._fetch_one(
            """
            UPDATE accounts
            SET deleted_at = NOW()
            WHERE account_id = %s AND deleted_at IS NULL
            RETURNING account_id
            """,
            (account_id,),
            commit=True,
        )
        return row is not None

    def list_accounts(
        self,
        *,
        offset: int,
        limit: int,
        search: str | None = None,
    ) -> tuple[list[Account], int]:
        """Return one page of live accounts, newest first, and the total match count.

        An ``offset`` at or past the match count skips the row query, so page
        numbers beyond the last page never reach ``OFFSET``.
        """
        clauses = ["deleted_at IS NULL"]
        params: list[Any] = []
        if search:
            pattern = f"%{escape_like(search)}%"
            clauses.append(
                "(username ILIKE %s OR name ILIKE %s OR COALESCE(email, '') ILIKE %s)"
            )
            params.extend([pattern, pattern, pattern])

        where_sql = " AND ".join(clauses)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(f"SELECT COUNT(*) FROM accounts WHERE {where_sql}", params)
                    total = int(cur.fetchone()[0])
                    if offset >= total:
                        return [], total
                    cur.execute(
                        f"""
                        SELECT {_ACCOUNT_COLUMNS}
                        FROM accounts
                        WHERE {where_sql}
                        ORDER BY created_at DESC, account_id DESC
                        LIMIT %s OFFSET %s
                        """,
                        [*params, limit, offset],
                    )
                    rows = cur.fetchall()
        except PsycopgError as exc:
            raise StoreError("account listing failed") from exc
        return [self._map_record(row) for row in rows], total

    def username_exists(self, username: str, exclude_id: int | None = None) -> bool:
        return self._exists("username", username, exclude_id)

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        return self._exists("email", email, exclude_id)

    def _exists(self, column: str, value: str, exclude_id: int | None) -> bool:
        query = f"SELECT 1 FROM accounts WHERE {column} = %s AND deleted_at IS NULL"
        params: list[Any] = [value]
        if exclude_id is not None:
            query += " AND account_id <> %s"
            params.append(exclude_id)
        return self._fetch_one(query + " LIMIT 1", params) is not None

    def _fetch_one(self, query: str, params: Any, *, commit: bool = False) -> tuple | None:
        """Run a single-row statement, translating driver failures into store errors."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
                if commit:
                    conn.commit()
        except pg_errors.UniqueViolation as exc:
            field = _CONSTRAINT_FIELDS.get(exc.diag.constraint_name or "", "username")
            raise StoreConflictError(field) from exc
        except PsycopgError as exc:
            raise StoreError("account store operation failed") from exc
        return row

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return AccountRecord(*row).to_domain()
