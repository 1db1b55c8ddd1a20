from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Aggregate root for a registered user.

    ``account_id``, ``created_at`` and ``updated_at`` are assigned by the
    store on insert and are ``None`` until then.
    """

    full_name: str
    email: str
    password_hash: str
    country: str = ""
    account_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
