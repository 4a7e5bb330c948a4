"""Failure kinds raised across the account use-case boundary."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    validation = "validation"
    invalid_credential = "invalid_credential"
    not_found = "not_found"
    username_taken = "username_taken"
    email_taken = "email_taken"
    internal = "internal"


class AccountServiceError(Exception):
    """Base class for failures surfaced to request handlers."""

    kind: FailureKind = FailureKind.internal

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class RequestValidationFailed(AccountServiceError):
    """Malformed or missing input, detected before any store access."""

    kind = FailureKind.validation


class InvalidCredentialError(AccountServiceError):
    """Missing, invalid or expired token, or a failed login."""

    kind = FailureKind.invalid_credential


class LoginFailedError(InvalidCredentialError):
    """Unknown username or wrong password; the two are deliberately indistinguishable."""


class AccountNotFoundError(AccountServiceError):
    kind = FailureKind.not_found


class AlreadyExistsError(AccountServiceError):
    """Uniqueness conflict on one of the account's unique fields."""


class UsernameTakenError(AlreadyExistsError):
    kind = FailureKind.username_taken


class EmailTakenError(AlreadyExistsError):
    kind = FailureKind.email_taken


class InternalError(AccountServiceError):
    kind = FailureKind.internal


class StoreError(Exception):
    """Raised by the account store when the backing database fails."""


class StoreConflictError(StoreError):
    """Raised by the account store when a unique index rejects a write."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} conflict")
        self.field = field
