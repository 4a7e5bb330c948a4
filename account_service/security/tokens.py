"""Utilities for issuing and validating account bearer tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

import jwt

from ..config import Settings
from ..domain.errors import InvalidCredentialError

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class SigningKey:
    """Process-wide HMAC key used to sign bearer tokens.

    Loaded once at startup and passed by reference to :class:`TokenService`.
    Replacing the secret invalidates every token issued under the old one.
    """

    secret: str
    algorithm: str = "HS256"

    def __repr__(self) -> str:
        return f"SigningKey(algorithm={self.algorithm!r})"


def load_signing_key(settings: Settings) -> SigningKey:
    """Build the signing key from runtime settings."""
    if not settings.jwt_secret:
        raise ValueError("JWT_SECRET must not be empty")
    return SigningKey(secret=settings.jwt_secret)


class TokenService:
    """Issue and validate signed, self-contained account tokens."""

    def __init__(
        self,
        key: SigningKey,
        *,
        issuer: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key = key
        self._issuer = issuer
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, account_id: int) -> str:
        """Create a signed JWT bound to ``account_id``.

        Parameters
        ----------
        account_id:
            Identifier embedded in the ``sub`` and ``user_id`` claims.

        Returns
        -------
        str
            The encoded token, valid until issuance time plus the configured TTL.
        """

        now = int(self._clock())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": str(account_id),
            "user_id": account_id,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        return jwt.encode(payload, self._key.secret, algorithm=self._key.algorithm)

    def validate(self, token: str) -> int:
        """Verify ``token`` and return the account identifier it is bound to.

        Raises
        ------
        InvalidCredentialError
            When the signature, issuer or expiry checks fail, or the token is malformed.
        """

        try:
            claims = jwt.decode(
                token,
                self._key.secret,
                algorithms=[self._key.algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "sub"], "verify_iat": False, "verify_exp": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidCredentialError("invalid token") from exc

        # expiry is checked against the injected clock rather than PyJWT's wall clock
        exp = claims.get("exp")
        if not isinstance(exp, int) or exp <= int(self._clock()):
            raise InvalidCredentialError("token expired")

        try:
            account_id = int(claims["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidCredentialError("invalid token subject") from exc
        if account_id <= 0:
            raise InvalidCredentialError("invalid token subject")
        return account_id
