"""In-memory account storage."""

from proptrack.store.account_store import AccountStore

__all__ = ["AccountStore"]
