"""bcrypt password hashing."""

from __future__ import annotations

import bcrypt

MIN_COST = 4
MAX_COST = 31
# bcrypt only consumes the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Salted, adaptive-cost password hashing with a fixed work factor.

    Passwords longer than 72 UTF-8 bytes are truncated identically when
    hashing and verifying.
    """

    def __init__(self, cost: int = 10) -> None:
        if not MIN_COST <= cost <= MAX_COST:
            raise ValueError(f"bcrypt cost must be between {MIN_COST} and {MAX_COST}")
        self._cost = cost

    @property
    def cost(self) -> int:
        return self._cost

    def hash(self, password: str) -> str:
        """Return the bcrypt hash of ``password`` as text."""
        digest = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=self._cost))
        return digest.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Compare ``password`` with ``hashed`` in constant time."""
        try:
            return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
