"""Response codes, messages and failure classification for API envelopes."""

from __future__ import annotations

from enum import Enum

from fastapi import status

from ..domain.errors import (
    AccountNotFoundError,
    EmailTakenError,
    InvalidCredentialError,
    LoginFailedError,
    RequestValidationFailed,
    UsernameTakenError,
)


class ResponseCode(str, Enum):
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# success
MSG_USER_REGISTERED = "User registered successfully"
MSG_USER_LOGGED_IN = "User logged in successfully"
MSG_PROFILE_RETRIEVED = "User profile retrieved successfully"
MSG_USER_LIST_RETRIEVED = "User list retrieved successfully"
MSG_USER_RETRIEVED = "User retrieved successfully"
MSG_USER_CREATED = "User created successfully"
MSG_USER_UPDATED = "User updated successfully"
MSG_USER_DELETED = "User deleted successfully"

# validation
MSG_USERNAME_REQUIRED = "Username is required"
MSG_NAME_REQUIRED = "Name is required"
MSG_EMAIL_REQUIRED = "Email is required"
MSG_PASSWORD_REQUIRED = "Password is required"
MSG_TOKEN_REQUIRED = "Authentication token is required"
MSG_INVALID_EMAIL = "Invalid email format"
MSG_INVALID_USERNAME = (
    "Username must be 3-30 characters and contain only letters, numbers, and underscores"
)
MSG_PASSWORD_TOO_SHORT = "Password must be at least 6 characters long"
MSG_INVALID_ROLE_ID = "Role ID must be a positive integer"
MSG_INVALID_USER_ID = "User ID must be a positive integer"
MSG_INVALID_REQUEST = "Invalid request"
MSG_FIELD_TOO_LONG = "{field} must be at most {limit} characters"

# authentication and conflicts
MSG_INVALID_CREDENTIALS = "Invalid username or password"
MSG_INVALID_TOKEN = "Invalid or expired token"
MSG_USERNAME_EXISTS = "Username already exists"
MSG_EMAIL_EXISTS = "Email address already exists"
MSG_USER_NOT_FOUND = "User not found"
MSG_INTERNAL_ERROR = "Internal server error"


_HTTP_STATUS = {
    ResponseCode.SUCCESS: status.HTTP_200_OK,
    ResponseCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ResponseCode.AUTHENTICATION_ERROR: status.HTTP_401_UNAUTHORIZED,
    ResponseCode.AUTHORIZATION_ERROR: status.HTTP_403_FORBIDDEN,
    ResponseCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResponseCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ResponseCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_status_for(code: ResponseCode) -> int:
    return _HTTP_STATUS[code]


def classify(exc: Exception) -> tuple[ResponseCode, str]:
    """Map a failure to its response code and caller-facing message by exception type."""
    if isinstance(exc, RequestValidationFailed):
        return ResponseCode.VALIDATION_ERROR, exc.message or MSG_INVALID_REQUEST
    if isinstance(exc, LoginFailedError):
        return ResponseCode.AUTHENTICATION_ERROR, MSG_INVALID_CREDENTIALS
    if isinstance(exc, InvalidCredentialError):
        return ResponseCode.AUTHENTICATION_ERROR, MSG_INVALID_TOKEN
    if isinstance(exc, AccountNotFoundError):
        return ResponseCode.NOT_FOUND, MSG_USER_NOT_FOUND
    if isinstance(exc, UsernameTakenError):
        return ResponseCode.ALREADY_EXISTS, MSG_USERNAME_EXISTS
    if isinstance(exc, EmailTakenError):
        return ResponseCode.ALREADY_EXISTS, MSG_EMAIL_EXISTS
    return ResponseCode.INTERNAL_ERROR, MSG_INTERNAL_ERROR
