"""Account service orchestrating persistence, password checks, and token issuance."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta

from schemas import WelcomeEmail

from .account import Account
from .contracts import AccountStore, CreateAccountInput, Notifier
from .errors import AccountError, AccountErrorKind
from ..security.passwords import PasswordHasher
from ..security.tokens import InvalidTokenError, TokenCodec, TokenSigningError

MAX_PAGE_SIZE = 100
DEFAULT_TOKEN_TTL = timedelta(days=4)
DEFAULT_WELCOME_TOPIC = "notification.SendEmail"


@dataclass(slots=True)
class LoginResult:
    """Authenticated account together with its freshly issued bearer token."""

    account: Account
    access_token: str


class AccountService:
    """Account workflows: registration, listing, login and token resolution."""

    def __init__(
        self,
        repository: AccountStore,
        notifier: Notifier,
        tokens: TokenCodec,
        hasher: PasswordHasher,
        *,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        welcome_topic: str = DEFAULT_WELCOME_TOPIC,
        executor: Executor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Store collaborators used by the account workflows.

        ``executor`` runs the fire-and-forget welcome notification; one
        background thread is created when none is supplied.
        """
        self._repository = repository
        self._notifier = notifier
        self._tokens = tokens
        self._hasher = hasher
        self._token_ttl = token_ttl
        self._welcome_topic = welcome_topic
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="notify")
        self._logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        """Release the notification executor if this service created it.

        Queued welcome emails are dropped; only an in-flight publish is awaited.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)

    def create_account(self, payload: CreateAccountInput) -> Account:
        """Register a new account and schedule its welcome email."""
        if not payload.password:
            self._logger.info("account creation rejected: empty password")
            raise AccountError(AccountErrorKind.EMPTY_PASSWORD)

        try:
            existing = self._repository.find_by_email(payload.email)
        except Exception as exc:
            self._logger.error("existing user email validation failed: %s", exc)
            raise AccountError(AccountErrorKind.TRANSIENT_STORE_ERROR) from exc
        if existing is not None:
            self._logger.info("account creation rejected: email already registered")
            raise AccountError(AccountErrorKind.DUPLICATE_EMAIL)

        try:
            password_hash = self._hasher.hash(payload.password)
        except ValueError as exc:
            self._logger.error("password hash error (cost=%d): %s", self._hasher.cost, exc)
            raise AccountError(AccountErrorKind.TRANSIENT_STORE_ERROR) from exc

        account = Account(
            full_name=payload.full_name,
            email=payload.email,
            password_hash=password_hash,
            country=payload.country,
        )
        try:
            account = self._repository.insert(account)
        except Exception as exc:
            self._logger.error("account insert failed: %s", exc)
            raise AccountError(AccountErrorKind.TRANSIENT_STORE_ERROR) from exc

        self._logger.info("account %s created", account.account_id)
        self._schedule_welcome_email(account)
        return account

    def list_accounts(self, after_id: str, limit: int) -> list[Account]:
        """Return the page of accounts whose id sorts strictly after ``after_id``."""
        if limit <= 0:
            raise AccountError(AccountErrorKind.MISSING_LIMIT)
        if limit > MAX_PAGE_SIZE:
            raise AccountError(AccountErrorKind.LIMIT_EXCEEDED)
        try:
            accounts = self._repository.find_page(after_id, limit)
        except Exception as exc:
            self._logger.error("account page lookup failed (after_id=%r): %s", after_id, exc)
            raise AccountError(AccountErrorKind.TRANSIENT_STORE_ERROR) from exc
        return list(accounts or [])

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate ``email``/``password`` and issue a bearer token.

        Every credential failure, including a store failure during lookup,
        raises the same ``INVALID_CREDENTIALS`` error.
        """
        if not email or not password:
            self._logger.info("login rejected: missing fields")
            raise AccountError(AccountErrorKind.INVALID_CREDENTIALS)

        try:
            account = self._repository.find_by_email(email)
        except Exception as exc:
            self._logger.warning("login lookup failed: %s", exc)
            raise AccountError(AccountErrorKind.INVALID_CREDENTIALS) from exc
        if account is None:
            self._logger.info("login rejected: unknown email")
            raise AccountError(AccountErrorKind.INVALID_CREDENTIALS)
        if not self._hasher.verify(password, account.password_hash):
            self._logger.info("login rejected: password mismatch for account %s", account.account_id)
            raise AccountError(AccountErrorKind.INVALID_CREDENTIALS)

        try:
            token = self._tokens.issue(account.account_id, account.created_at, self._token_ttl)
        except TokenSigningError as exc:
            self._logger.error("jwt generation failed: %s", exc)
            raise AccountError(AccountErrorKind.TRANSIENT_STORE_ERROR) from exc
        return LoginResult(account=account, access_token=token)

    def resolve_from_token(self, token: str) -> Account:
        """Return the account identified by a bearer token's ``userId`` claim."""
        try:
            claims = self._tokens.verify(token)
        except InvalidTokenError as exc:
            self._logger.info("jwt rejected: %s", exc)
            raise AccountError(AccountErrorKind.INVALID_TOKEN) from exc

        user_id = claims.get("userId")
        if not isinstance(user_id, str) or not user_id:
            self._logger.info("jwt rejected: missing userId claim")
            raise AccountError(AccountErrorKind.INVALID_TOKEN)

        try:
            account = self._repository.find_by_id(user_id)
        except Exception as exc:
            self._logger.warning("account lookup by id failed: %s", exc)
            raise AccountError(AccountErrorKind.ACCOUNT_NOT_FOUND) from exc
        if account is None:
            raise AccountError(AccountErrorKind.ACCOUNT_NOT_FOUND)
        return account

    def _schedule_welcome_email(self, account: Account) -> None:
        message = WelcomeEmail(to=account.email)
        try:
            self._executor.submit(self._publish_welcome_email, message)
        except RuntimeError as exc:
            self._logger.warning("welcome email for account %s not scheduled: %s", account.account_id, exc)

    def _publish_welcome_email(self, message: WelcomeEmail) -> None:
        try:
            self._notifier.publish(self._welcome_topic, message.model_dump_json().encode("utf-8"))
        except Exception:
            self._logger.exception("publishing to %s failed", self._welcome_topic)
