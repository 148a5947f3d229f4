"""Accounts, entries and transfers for a simple bank, stored in SQLite."""

__version__ = "0.1.0"
__all__ = ["models", "queries", "random_util"]