# simplebank

A small data layer for a bank. It keeps accounts, balance entries and money
transfers in an SQLite database through the standard `sqlite3` module. It also
has helpers that make random owners, amounts and currencies for tests and
demos. It has no third-party dependencies.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## Usage

```python
import sqlite3

from simplebank import random_util
from simplebank.queries import NotFoundError, Queries, create_schema

connection = sqlite3.connect(":memory:")
create_schema(connection)
queries = Queries(connection)

alice = queries.create_account("alice", 100, "EUR")
bob = queries.create_account(
    random_util.random_owner(),
    random_util.random_money(),
    random_util.random_currency(),
)

queries.update_account(alice.id, 250)
queries.create_entry(alice.id, -50)
queries.create_transfer(alice.id, bob.id, 50)
connection.commit()

for account in queries.list_accounts(limit=5, offset=0):
    print(account.to_dict())

carol = queries.create_account("carol", 0, "USD")
queries.delete_account(carol.id)
try:
    queries.get_account(carol.id)
except NotFoundError:
    print("carol is gone")
```

### Records

`simplebank.models` defines three frozen dataclasses:

- `Account`: `id`, `owner`, `balance`, `currency`, `created_at`
- `Entry`: `id`, `account_id`, `amount` (negative or positive), `created_at`
- `Transfer`: `id`, `from_account_id`, `to_account_id`, `amount`, `created_at`

`created_at` is a `datetime`. Each class has a `to_dict()` method that returns
its fields under the same names, with `created_at` as an ISO 8601 string.

### Queries

`create_schema(connection)` creates the `accounts`, `entries` and `transfers`
tables and their indexes if they do not exist yet.

`Queries(connection)` wraps a connection and provides:

- accounts: `create_account(owner, balance, currency)`,
  `get_account(account_id)`, `update_account(account_id, balance)`,
  `delete_account(account_id)`, `list_accounts(limit, offset)`
- entries: `create_entry(account_id, amount)`, `get_entry(entry_id)`,
  `update_entry(entry_id, amount)`, `delete_entry(entry_id)`,
  `list_entries(limit, offset)`
- transfers: `create_transfer(from_account_id, to_account_id, amount)`,
  `get_transfer(transfer_id)`, `list_transfers(limit, offset)`,
  `list_transfers_between_accounts(from_account_id, to_account_id, limit, offset)`,
  `list_transfers_from_account(from_account_id, limit, offset)`

Behaviour to know:

- Creating and updating return the record as stored, with its `id` and a UTC
  `created_at` timestamp.
- `get_*` and `update_*` raise `NotFoundError` (a `LookupError`, message
  `"no rows in result set"`) when no row has the given id. Deleting a row that
  does not exist is not an error.
- The `list_*` methods return one page as a list, ordered by id, and raise
  `ValueError` for a negative `limit` or `offset`.
- `list_transfers_between_accounts` returns transfers in either direction
  between the two accounts.
- `list_transfers_from_account` returns all transfers, ordered first by whether
  they leave the account, then by whether they arrive at it, then by id, so
  the ones touching the account come last.
- Queries never commit. The caller owns the connection and its transactions.
  `with_tx(connection)` returns a new `Queries` bound to another connection.

### Random data

`simplebank.random_util` provides:

- `random_int(min_value, max_value)`: an integer with both bounds included;
  raises `ValueError` if `max_value` is below `min_value`
- `random_string(n)`: `n` lower-case ASCII letters
- `random_owner()`: six random letters
- `random_money()`: an integer from 0 to 1000
- `random_currency()`: one of `EUR`, `USD`, `CAD`

## What it does not do

The package only stores and reads records. Recording a transfer does not
change either account's balance and does not add entries. Nothing checks that
accounts exist, that currencies match, or that a transfer amount is positive.
There is no command-line tool and no HTTP server.

## Running the tests

```
pytest
```