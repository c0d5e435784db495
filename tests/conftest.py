"""Shared fixtures: one temporary SQLite database per test."""

from __future__ import annotations

from decimal import Decimal

import pytest

from predict_ledger.ledger import Ledger
from predict_ledger.persistence.db import init_db
from predict_ledger.persistence.store import LedgerStore

ZERO = Decimal("0")

DAY = 86400
START_TS = 1710000000  # 2024-03-09 16:00 UTC
NORMALIZED_TS = 1709942400  # start of that UTC day

TRADER = "0x1234567890123456789012345678901234567890"
OTHER_TRADER = "0x00000000000000000000000000000000000000aa"
MARKET = "0x0000000000000000000000000000000000000001"
OTHER_MARKET = "0x0000000000000000000000000000000000000002"


@pytest.fixture
def engine(tmp_path):
    return init_db(f"sqlite:///{tmp_path / 'ledger.db'}")


@pytest.fixture
def ledger(engine) -> Ledger:
    return Ledger(engine)


@pytest.fixture
def store(engine):
    """Store on an open transaction, committed when the test finishes."""
    with engine.begin() as conn:
        yield LedgerStore(conn)
