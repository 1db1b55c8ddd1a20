"""Error kinds surfaced by the account service."""

from __future__ import annotations

from enum import Enum


class AccountErrorKind(str, Enum):
    EMPTY_PASSWORD = "empty_password"
    MISSING_LIMIT = "missing_limit"
    LIMIT_EXCEEDED = "limit_exceeded"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    ACCOUNT_NOT_FOUND = "account_not_found"
    TRANSIENT_STORE_ERROR = "transient_store_error"


_MESSAGES: dict[AccountErrorKind, str] = {
    AccountErrorKind.EMPTY_PASSWORD: "password must not be empty",
    AccountErrorKind.MISSING_LIMIT: "filter limit must be provided",
    AccountErrorKind.LIMIT_EXCEEDED: "pagination limit max is 100",
    AccountErrorKind.DUPLICATE_EMAIL: "user with this email already exist",
    AccountErrorKind.INVALID_CREDENTIALS: "invalid credentials",
    AccountErrorKind.INVALID_TOKEN: "invalid jwt",
    AccountErrorKind.ACCOUNT_NOT_FOUND: "user does not exist",
    AccountErrorKind.TRANSIENT_STORE_ERROR: "an error occurred, please try again later",
}


class AccountError(Exception):
    """Raised by :class:`~app.domain.service.AccountService` workflows.

    ``message`` is safe to return to callers; underlying causes are only
    reachable through ``__cause__`` and the service logs.
    """

    def __init__(self, kind: AccountErrorKind) -> None:
        self.kind = kind
        self.message = _MESSAGES[kind]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AccountError({self.kind.name})"
