import sqlite3
from datetime import timedelta

import pytest

from simplebank.queries import NotFoundError, Queries, create_schema
from simplebank.random_util import (
    CURRENCIES,
    random_currency,
    random_int,
    random_money,
    random_owner,
)

ONE_SECOND = timedelta(seconds=1)


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def queries(connection):
    return Queries(connection)


def create_random_account(queries):
    owner, balance, currency = random_owner(), random_money(), random_currency()
    account = queries.create_account(owner, balance, currency)
    assert account.owner == owner
    assert account.balance == balance
    assert account.currency == currency
    assert account.id != 0
    assert account.created_at.year > 1
    return account


def create_random_entry(queries):
    account_id, amount = random_int(1, 5), random_int(-100, 100)
    entry = queries.create_entry(account_id, amount)
    assert entry.account_id == account_id
    assert entry.amount == amount
    assert entry.id != 0
    assert entry.created_at.year > 1
    return entry


def create_random_transfer(queries):
    from_id, to_id, amount = random_int(1, 5), random_int(1, 5), random_int(1, 100)
    transfer = queries.create_transfer(from_id, to_id, amount)
    assert transfer.from_account_id == from_id
    assert transfer.to_account_id == to_id
    assert transfer.amount == amount
    assert transfer.id != 0
    assert transfer.created_at.year > 1
    return transfer


# accounts


def test_create_account(queries):
    account = create_random_account(queries)
    assert account.currency in CURRENCIES


def test_get_account(queries):
    account1 = create_random_account(queries)
    account2 = queries.get_account(account1.id)
    assert account2.id == account1.id
    assert account2.owner == account1.owner
    assert account2.balance == account1.balance
    assert account2.currency == account1.currency
    assert abs(account2.created_at - account1.created_at) <= ONE_SECOND


def test_update_account(queries):
    account1 = create_random_account(queries)
    balance = random_money()
    account2 = queries.update_account(account1.id, balance)
    assert account2.id == account1.id
    assert account2.owner == account1.owner
    assert account2.balance == balance
    assert account2.currency == account1.currency
    assert abs(account2.created_at - account1.created_at) <= ONE_SECOND


def test_update_missing_account_raises(queries):
    with pytest.raises(NotFoundError):
        queries.update_account(999, 10)


def test_delete_account(queries):
    account1 = create_random_account(queries)
    queries.delete_account(account1.id)
    with pytest.raises(NotFoundError, match="no rows in result set"):
        queries.get_account(account1.id)


def test_list_accounts(queries):
    created = [create_random_account(queries) for _ in range(10)]
    accounts = queries.list_accounts(5, 5)
    assert len(accounts) == 5
    assert accounts == created[5:]


def test_list_accounts_rejects_negative_limit(queries):
    with pytest.raises(ValueError):
        queries.list_accounts(-1, 0)


# entries


def test_create_entry(queries):
    entry = create_random_entry(queries)
    assert -100 <= entry.amount <= 100


def test_get_entry(queries):
    entry1 = create_random_entry(queries)
    entry2 = queries.get_entry(entry1.id)
    assert entry2.account_id == entry1.account_id
    assert entry2.amount == entry1.amount
    assert entry2.created_at == entry1.created_at
    assert entry2.id == entry1.id
    assert abs(entry2.created_at - entry1.created_at) <= ONE_SECOND


def test_update_entry(queries):
    entry1 = create_random_entry(queries)
    entry2 = queries.update_entry(entry1.id, 10)
    assert entry2.account_id == entry1.account_id
    assert entry2.amount == 10
    assert entry2.created_at == entry1.created_at
    assert entry2.id == entry1.id


def test_delete_entry(queries):
    entry1 = create_random_entry(queries)
    queries.delete_entry(entry1.id)
    with pytest.raises(NotFoundError, match="no rows in result set"):
        queries.get_entry(entry1.id)


def test_delete_entry_by_account_id_of_fresh_db(queries):
    account = create_random_account(queries)
    queries.delete_entry(account.id)
    with pytest.raises(NotFoundError):
        queries.get_entry(account.id)


def test_list_entries(queries):
    created = [create_random_entry(queries) for _ in range(10)]
    entries = queries.list_entries(5, 5)
    assert len(entries) == 5
    assert entries == created[5:]


# transfers


def test_create_transfer(queries):
    transfer = create_random_transfer(queries)
    assert 1 <= transfer.amount <= 100


def test_get_transfer(queries):
    transfer1 = create_random_transfer(queries)
    transfer2 = queries.get_transfer(transfer1.id)
    assert transfer2.from_account_id == transfer1.from_account_id
    assert transfer2.to_account_id == transfer1.to_account_id
    assert transfer2.amount == transfer1.amount
    assert abs(transfer2.created_at - transfer1.created_at) <= ONE_SECOND


def test_get_missing_transfer_raises(queries):
    with pytest.raises(NotFoundError):
        queries.get_transfer(42)


def test_list_transfers(queries):
    created = [create_random_transfer(queries) for _ in range(10)]
    transfers = queries.list_transfers(5, 5)
    assert len(transfers) == 5
    assert transfers == created[5:]


def test_list_transfers_between_accounts(queries):
    t1 = queries.create_transfer(1, 2, 10)
    t2 = queries.create_transfer(2, 1, 20)
    queries.create_transfer(1, 3, 30)
    assert queries.list_transfers_between_accounts(1, 2, 10, 0) == [t1, t2]
    assert queries.list_transfers_between_accounts(2, 1, 1, 1) == [t2]


def test_list_transfers_from_account_orders_matches_last(queries):
    outgoing = queries.create_transfer(1, 2, 10)
    incoming = queries.create_transfer(3, 1, 20)
    unrelated = queries.create_transfer(3, 4, 30)
    result = queries.list_transfers_from_account(1, 10, 0)
    assert result == [unrelated, incoming, outgoing]
    assert queries.list_transfers_from_account(1, 1, 2) == [outgoing]


def test_list_transfers_rejects_negative_offset(queries):
    with pytest.raises(ValueError):
        queries.list_transfers(5, -1)


# connections


def test_with_tx_shares_the_connection(connection, queries):
    account = create_random_account(queries)
    tx_queries = queries.with_tx(connection)
    assert tx_queries.get_account(account.id) == account


def test_with_tx_rollback_discards_writes(connection, queries):
    connection.commit()
    tx_queries = queries.with_tx(connection)
    account = create_random_account(tx_queries)
    connection.rollback()
    with pytest.raises(NotFoundError):
        queries.get_account(account.id)