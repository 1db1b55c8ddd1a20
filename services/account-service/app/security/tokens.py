"""Issuing and validating the service's bearer JWTs."""

from __future__ import annotations

import time
from datetime import datetime, timedelta
from typing import Any, Callable

import jwt

SIGNING_ALGORITHM = "HS256"
# Tokens signed with anything outside the HMAC family are rejected before
# signature verification.
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]


class InvalidTokenError(Exception):
    """Raised when a token fails parsing, signature or claim checks."""


class ExpiredTokenError(InvalidTokenError):
    """Raised when a token's ``exp`` claim lies in the past."""


class TokenSigningError(Exception):
    """Raised when a claim set cannot be encoded and signed."""


class TokenCodec:
    """Stateless JWT issuer/verifier bound to a symmetric signing secret."""

    def __init__(self, secret: str, *, clock: Callable[[], float] = time.time) -> None:
        if not secret:
            raise ValueError("token signing secret must be configured")
        self._secret = secret
        self._clock = clock

    def __repr__(self) -> str:
        return f"TokenCodec(algorithm={SIGNING_ALGORITHM!r})"

    def issue(self, user_id: str, embedded_timestamp: datetime | None, ttl: timedelta) -> str:
        """Create a signed JWT for ``user_id``.

        Parameters
        ----------
        user_id:
            Account identifier stored in the ``userId`` claim.
        embedded_timestamp:
            Carried verbatim in the ``timeAdded`` claim; never re-validated.
        ttl:
            Lifetime of the token, counted from now.

        Returns
        -------
        str
            The compact serialised token.
        """
        now = self._clock()
        payload: dict[str, Any] = {
            "userId": user_id,
            "timeAdded": embedded_timestamp.isoformat() if embedded_timestamp else None,
            "exp": int(now + ttl.total_seconds()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=SIGNING_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenSigningError("unable to sign token") from exc

    def verify(self, token: str) -> dict[str, Any]:
        """Decode and verify ``token`` returning its claims.

        Raises
        ------
        ExpiredTokenError
            The signature is valid but ``exp`` has passed.
        InvalidTokenError
            Any other parsing, algorithm or signature failure.
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=ACCEPTED_ALGORITHMS,
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("token has expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
