"""Domain-level request contracts and collaborator interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .account import Account


@dataclass(slots=True)
class CreateAccountInput:
    """Inputs required to register an account; ``password`` is plaintext."""

    full_name: str
    email: str
    password: str
    country: str = ""


class AccountStore(Protocol):
    """Persistence contract consumed by the account service.

    Lookups return ``None`` when nothing matches; store failures raise.
    """

    def insert(self, account: Account) -> Account:
        """Persist ``account``, assigning its identifier and timestamps."""
        ...

    def find_page(self, after_id: str, limit: int) -> list[Account]:
        """Return up to ``limit`` accounts with ids strictly after ``after_id``."""
        ...

    def find_by_email(self, email: str) -> Account | None:
        ...

    def find_by_id(self, account_id: str) -> Account | None:
        ...


class Notifier(Protocol):
    """Publish-only message channel."""

    def publish(self, topic: str, payload: bytes) -> None:
        ...
