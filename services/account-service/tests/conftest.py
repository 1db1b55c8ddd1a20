from __future__ import annotations

from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.domain.account import Account
from app.domain.service import AccountService
from app.security.passwords import PasswordHasher
from app.security.tokens import TokenCodec

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class StoreUnavailable(Exception):
    """Simulated connection failure raised by the fake repository."""


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviours."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._seq = count(1)
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreUnavailable(f"{operation} failed: connection refused")

    def insert(self, account: Account) -> Account:
        self._maybe_fail("insert")
        # zero-padded hex keeps lexicographic order equal to insertion order
        account.account_id = f"{next(self._seq):024x}"
        now = datetime.now(timezone.utc)
        account.created_at = now
        account.updated_at = now
        self._accounts[account.account_id] = account
        return account

    def find_page(self, after_id: str, limit: int) -> list[Account]:
        self._maybe_fail("find_page")
        ids = sorted(i for i in self._accounts if i > after_id)
        return [self._accounts[i] for i in ids[:limit]]

    def find_by_email(self, email: str) -> Account | None:
        self._maybe_fail("find_by_email")
        for account in self._accounts.values():
            if account.email == email:
                return account
        return None

    def find_by_id(self, account_id: str) -> Account | None:
        self._maybe_fail("find_by_id")
        return self._accounts.get(account_id)

    def delete(self, account_id: str) -> None:
        self._accounts.pop(account_id, None)


class FakeNotifier:
    def __init__(self) -> None:
        self.published: list[tuple[str, bytes]] = []
        self.fail = False

    def publish(self, topic: str, payload: bytes) -> None:
        if self.fail:
            raise ConnectionError("notification channel unavailable")
        self.published.append((topic, payload))


class ImmediateExecutor(Executor):
    """Runs submitted callables inline so published events are observable at once."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def immediate_executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def codec(secret) -> TokenCodec:
    return TokenCodec(secret)


@pytest.fixture
def hasher() -> PasswordHasher:
    # lowest bcrypt cost keeps the suite fast
    return PasswordHasher(cost=4)


@pytest.fixture
def service(repository, notifier, codec, hasher, immediate_executor) -> AccountService:
    svc = AccountService(repository, notifier, codec, hasher, executor=immediate_executor)
    yield svc
    svc.close()


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, service
