"""Field-level request validation applied before the use-case layer."""

from __future__ import annotations

import re

from ..domain.errors import RequestValidationFailed
from . import responses as msg

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
MIN_PASSWORD_LENGTH = 6

# column widths of the accounts table
MAX_FIELD_LENGTHS = {
    "name": ("Name", 100),
    "email": ("Email", 100),
    "phone": ("Phone", 20),
    "mobile": ("Mobile", 20),
    "image_url": ("Image URL", 255),
}


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def require_token(authorization: str | None) -> str:
    """Extract the bearer token from an ``Authorization`` header value."""
    if _blank(authorization):
        raise RequestValidationFailed(msg.MSG_TOKEN_REQUIRED)
    scheme, _, credentials = authorization.strip().partition(" ")
    token = credentials.strip() if scheme.lower() == "bearer" else authorization.strip()
    if not token:
        raise RequestValidationFailed(msg.MSG_TOKEN_REQUIRED)
    return token


def validate_user_id(user_id: int) -> int:
    if user_id <= 0:
        raise RequestValidationFailed(msg.MSG_INVALID_USER_ID)
    return user_id


def validate_role_id(role_id: int | None) -> None:
    if role_id is not None and role_id <= 0:
        raise RequestValidationFailed(msg.MSG_INVALID_ROLE_ID)


def validate_username(username: str | None) -> None:
    if _blank(username):
        raise RequestValidationFailed(msg.MSG_USERNAME_REQUIRED)
    if not USERNAME_RE.match(username):
        raise RequestValidationFailed(msg.MSG_INVALID_USERNAME)


def validate_email(email: str | None, *, required: bool) -> None:
    if _blank(email):
        if required:
            raise RequestValidationFailed(msg.MSG_EMAIL_REQUIRED)
        return
    if not EMAIL_RE.match(email):
        raise RequestValidationFailed(msg.MSG_INVALID_EMAIL)


def validate_lengths(**fields: str | None) -> None:
    """Reject values longer than the column that stores them."""
    for field, value in fields.items():
        label, limit = MAX_FIELD_LENGTHS[field]
        if value is not None and len(value) > limit:
            raise RequestValidationFailed(msg.MSG_FIELD_TOO_LONG.format(field=label, limit=limit))


def validate_password(password: str | None) -> None:
    if _blank(password):
        raise RequestValidationFailed(msg.MSG_PASSWORD_REQUIRED)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RequestValidationFailed(msg.MSG_PASSWORD_TOO_SHORT)


def validate_new_account(
    *,
    username: str | None,
    name: str | None,
    email: str | None,
    password: str | None,
    role_id: int | None,
    phone: str | None = "",
    mobile: str | None = "",
    image_url: str | None = "",
) -> None:
    """Checks shared by registration and authenticated account creation.

    Presence is checked for every field before any format rule runs.
    """
    if _blank(username):
        raise RequestValidationFailed(msg.MSG_USERNAME_REQUIRED)
    if _blank(name):
        raise RequestValidationFailed(msg.MSG_NAME_REQUIRED)
    if _blank(email):
        raise RequestValidationFailed(msg.MSG_EMAIL_REQUIRED)
    if _blank(password):
        raise RequestValidationFailed(msg.MSG_PASSWORD_REQUIRED)
    validate_email(email, required=True)
    validate_username(username)
    validate_password(password)
    validate_role_id(role_id)
    validate_lengths(name=name, email=email, phone=phone, mobile=mobile, image_url=image_url)


def validate_profile_update(
    *,
    username: str | None,
    name: str | None,
    email: str | None,
    role_id: int | None,
    phone: str | None = "",
    mobile: str | None = "",
    image_url: str | None = "",
) -> None:
    if _blank(username):
        raise RequestValidationFailed(msg.MSG_USERNAME_REQUIRED)
    if _blank(name):
        raise RequestValidationFailed(msg.MSG_NAME_REQUIRED)
    validate_email(email, required=False)
    validate_username(username)
    validate_role_id(role_id)
    validate_lengths(name=name, email=email, phone=phone, mobile=mobile, image_url=image_url)


def validate_login(username: str | None, password: str | None) -> None:
    if _blank(username):
        raise RequestValidationFailed(msg.MSG_USERNAME_REQUIRED)
    if _blank(password):
        raise RequestValidationFailed(msg.MSG_PASSWORD_REQUIRED)
