"""Persistence layer — SQLite (WAL) / PostgreSQL via SQLAlchemy Core."""

from predict_ledger.persistence.db import get_engine, init_db
from predict_ledger.persistence.store import LedgerStore

__all__ = ["LedgerStore", "get_engine", "init_db"]
