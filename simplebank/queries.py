"""Storage of accounts, entries and transfers in an SQLite database.

The queries do not commit; the caller owns the connection and its transactions.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any, TypeVar

from .models import Account, Entry, Transfer

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner TEXT NOT NULL,
    balance INTEGER NOT NULL,
    currency TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS accounts_owner_idx ON accounts (owner);

CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS entries_account_id_idx ON entries (account_id);

CREATE TABLE IF NOT EXISTS transfers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_account_id INTEGER NOT NULL REFERENCES accounts (id),
    to_account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS transfers_from_idx ON transfers (from_account_id);
CREATE INDEX IF NOT EXISTS transfers_to_idx ON transfers (to_account_id);
CREATE INDEX IF NOT EXISTS transfers_pair_idx ON transfers (from_account_id, to_account_id);
"""

_ACCOUNT_COLUMNS = "id, owner, balance, currency, created_at"
_ENTRY_COLUMNS = "id, account_id, amount, created_at"
_TRANSFER_COLUMNS = "id, from_account_id, to_account_id, amount, created_at"


class NotFoundError(LookupError):
    """Raised when a query that must return a row finds none."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


def create_schema(connection: sqlite3.Connection) -> None:
    """Create the bank's tables and indexes if they do not exist yet."""
    connection.executescript(_SCHEMA)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _account(row: tuple) -> Account:
    id_, owner, balance, currency, created_at = row
    return Account(id_, owner, balance, currency, datetime.fromisoformat(created_at))


def _entry(row: tuple) -> Entry:
    id_, account_id, amount, created_at = row
    return Entry(id_, account_id, amount, datetime.fromisoformat(created_at))


def _transfer(row: tuple) -> Transfer:
    id_, from_id, to_id, amount, created_at = row
    return Transfer(id_, from_id, to_id, amount, datetime.fromisoformat(created_at))


def _check_page(limit: int, offset: int) -> None:
    if limit < 0:
        raise ValueError(f"LIMIT must not be negative: {limit}")
    if offset < 0:
        raise ValueError(f"OFFSET must not be negative: {offset}")


class Queries:
    """Typed queries over one database connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def with_tx(self, connection: sqlite3.Connection) -> Queries:
        """Return queries that run on another connection, such as one inside a transaction."""
        return Queries(connection)

    def _one(self, sql: str, params: Iterable[Any] | dict, factory: Callable[[tuple], T]) -> T:
        row = self._connection.execute(sql, params).fetchone()
        if row is None:
            raise NotFoundError()
        return factory(row)

    def _many(self, sql: str, params: Iterable[Any] | dict, factory: Callable[[tuple], T]) -> list[T]:
        return [factory(row) for row in self._connection.execute(sql, params)]

    def _insert(self, sql: str, params: Iterable[Any]) -> int:
        return self._connection.execute(sql, params).lastrowid

    def _update(self, sql: str, params: Iterable[Any]) -> None:
        if self._connection.execute(sql, params).rowcount == 0:
            raise NotFoundError()

    # accounts

    def create_account(self, owner: str, balance: int, currency: str) -> Account:
        """Insert an account and return it as stored."""
        new_id = self._insert(
            "INSERT INTO accounts (owner, balance, currency, created_at) VALUES (?, ?, ?, ?)",
            (owner, balance, currency, _now()),
        )
        return self.get_account(new_id)

    def get_account(self, account_id: int) -> Account:
        """Return the account with the given id, or raise NotFoundError."""
        return self._one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ? LIMIT 1",
            (account_id,),
            _account,
        )

    def update_account(self, account_id: int, balance: int) -> Account:
        """Set an account's balance and return the updated account."""
        self._update("UPDATE accounts SET balance = ? WHERE id = ?", (balance, account_id))
        return self.get_account(account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account; deleting a missing account is not an error."""
        self._connection.execute("DELETE FROM accounts WHERE id = ?", (account_id,))

    def list_accounts(self, limit: int, offset: int) -> list[Account]:
        """Return a page of accounts ordered by id."""
        _check_page(limit, offset)
        return self._many(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset),
            _account,
        )

    # entries

    def create_entry(self, account_id: int, amount: int) -> Entry:
        """Insert a balance entry and return it as stored."""
        new_id = self._insert(
            "INSERT INTO entries (account_id, amount, created_at) VALUES (?, ?, ?)",
            (account_id, amount, _now()),
        )
        return self.get_entry(new_id)

    def get_entry(self, entry_id: int) -> Entry:
        """Return the entry with the given id, or raise NotFoundError."""
        return self._one(
            f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = ? LIMIT 1",
            (entry_id,),
            _entry,
        )

    def update_entry(self, entry_id: int, amount: int) -> Entry:
        """Set an entry's amount and return the updated entry."""
        self._update("UPDATE entries SET amount = ? WHERE id = ?", (amount, entry_id))
        return self.get_entry(entry_id)

    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry; deleting a missing entry is not an error."""
        self._connection.execute("DELETE FROM entries WHERE id = ?", (entry_id,))

    def list_entries(self, limit: int, offset: int) -> list[Entry]:
        """Return a page of entries ordered by id."""
        _check_page(limit, offset)
        return self._many(
            f"SELECT {_ENTRY_COLUMNS} FROM entries ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset),
            _entry,
        )

    # transfers

    def create_transfer(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        """Insert a transfer record and return it as stored."""
        new_id = self._insert(
            "INSERT INTO transfers (from_account_id, to_account_id, amount, created_at) "
            "VALUES (?, ?, ?, ?)",
            (from_account_id, to_account_id, amount, _now()),
        )
        return self.get_transfer(new_id)

    def get_transfer(self, transfer_id: int) -> Transfer:
        """Return the transfer with the given id, or raise NotFoundError."""
        return self._one(
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers WHERE id = ? LIMIT 1",
            (transfer_id,),
            _transfer,
        )

    def list_transfers(self, limit: int, offset: int) -> list[Transfer]:
        """Return a page of transfers ordered by id."""
        _check_page(limit, offset)
        return self._many(
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers ORDER BY id LIMIT ? OFFSET ?",
            (limit, offset),
            _transfer,
        )

    def list_transfers_between_accounts(
        self, from_account_id: int, to_account_id: int, limit: int, offset: int
    ) -> list[Transfer]:
        """Return a page of transfers in either direction between two accounts."""
        _check_page(limit, offset)
        return self._many(
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers "
            "WHERE (from_account_id = :a AND to_account_id = :b) "
            "OR (from_account_id = :b AND to_account_id = :a) "
            "ORDER BY id LIMIT :limit OFFSET :offset",
            {"a": from_account_id, "b": to_account_id, "limit": limit, "offset": offset},
            _transfer,
        )

    def list_transfers_from_account(
        self, from_account_id: int, limit: int, offset: int
    ) -> list[Transfer]:
        """Return a page of all transfers, those touching the account sorted last.

        Transfers are ordered first by whether they leave the account, then by
        whether they arrive at it, then by id.
        """
        _check_page(limit, offset)
        return self._many(
            f"SELECT {_TRANSFER_COLUMNS} FROM transfers "
            "ORDER BY from_account_id = :a, to_account_id = :a, id "
            "LIMIT :limit OFFSET :offset",
            {"a": from_account_id, "limit": limit, "offset": offset},
            _transfer,
        )