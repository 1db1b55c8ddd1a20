"""Database repository for account data."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account

_COLUMNS = "account_id, full_name, email, password_hash, country, created_at, updated_at"

# No unique constraint on email: uniqueness is checked by the service before insert.
# Ids compare bytewise (COLLATE "C") whatever the database locale.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id    TEXT COLLATE "C" PRIMARY KEY,
    full_name     TEXT NOT NULL DEFAULT '',
    email         TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    country       TEXT NOT NULL DEFAULT '',
    created_at    TIMESTAMPTZ NOT NULL,
    updated_at    TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS accounts_email_idx ON accounts (email);
"""


class AccountRepository:
    """Postgres-backed account persistence."""

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        timeout: float | None = None,
        statement_timeout_ms: int | None = None,
    ) -> None:
        """Store the connection pool and the time bounds applied to every call."""
        self._pool = pool
        self._timeout = timeout
        self._statement_timeout_ms = statement_timeout_ms

    def _connection(self):
        return self._pool.connection(timeout=self._timeout)

    def _apply_timeout(self, cur) -> None:
        if self._statement_timeout_ms:
            cur.execute(
                "SELECT set_config('statement_timeout', %s, true)",
                (str(self._statement_timeout_ms),),
            )

    def ensure_schema(self) -> None:
        """Create the accounts table when it does not exist yet."""
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()

    def insert(self, account: Account) -> Account:
        """Persist a new account, assigning its id and timestamps in place."""
        account.account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        account.created_at = now
        account.updated_at = now
        with self._connection() as conn:
            with conn.cursor() as cur:
                self._apply_timeout(cur)
                cur.execute(
                    f"""
                    INSERT INTO accounts ({_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        account.account_id,
                        account.full_name,
                        account.email,
                        account.password_hash,
                        account.country,
                        account.created_at,
                        account.updated_at,
                    ),
                )
            conn.commit()
        return account

    def find_page(self, after_id: str, limit: int) -> list[Account]:
        """Return up to ``limit`` accounts with ids strictly after ``after_id``, ascending."""
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                self._apply_timeout(cur)
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM accounts
                    WHERE account_id COLLATE "C" > %s
                    ORDER BY account_id COLLATE "C" ASC
                    LIMIT %s
                    """,
                    (after_id, limit),
                )
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def find_by_email(self, email: str) -> Account | None:
        """Return the account registered under ``email`` or ``None``."""
        return self._find_one("email", email)

    def find_by_id(self, account_id: str) -> Account | None:
        """Return the account with ``account_id`` or ``None``."""
        return self._find_one("account_id", account_id)

    def _find_one(self, column: str, value: str) -> Account | None:
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                self._apply_timeout(cur)
                cur.execute(
                    f"SELECT {_COLUMNS} FROM accounts WHERE {column} = %s LIMIT 1",
                    (value,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            full_name=row[1],
            email=row[2],
            password_hash=row[3],
            country=row[4] or "",
            created_at=row[5],
            updated_at=row[6],
        )
