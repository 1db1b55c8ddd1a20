"""Account-related DTOs shared across services."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel


class Account(BaseModel):
    account_id: str
    full_name: str
    email: str
    country: str = ""
    created_at: datetime
    updated_at: datetime
