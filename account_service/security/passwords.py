"""Password hashing helpers built on Argon2id."""

from __future__ import annotations

from argon2 import PasswordHasher as _Argon2Hasher
from argon2 import exceptions as argon_exc

from ..config import Settings
from ..domain.errors import InternalError


class PasswordHasher:
    """One-way salted hashing and verification of account secrets."""

    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._hasher = _Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.password_time_cost,
            memory_cost=settings.password_memory_cost,
            parallelism=settings.password_parallelism,
        )

    def hash(self, secret: str) -> str:
        """Return an Argon2id PHC string for ``secret`` using a fresh random salt."""
        try:
            return self._hasher.hash(secret)
        except argon_exc.HashingError as exc:
            raise InternalError("password hashing failed") from exc

    def verify(self, hashed: str | None, candidate: str) -> bool:
        """Return ``True`` when ``candidate`` matches the stored hash; never raises on mismatch."""
        if not hashed:
            return False
        try:
            return self._hasher.verify(hashed, candidate)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
