"""SQLAlchemy Core table definitions for the ledger.

Timestamps are Unix epoch seconds (integers). Money columns hold Decimal values
as strings so amounts in base units (wei, 1e-6 USDC) keep full precision on
SQLite as well as PostgreSQL.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeDecorator


class Money(TypeDecorator):
    """Lossless Decimal stored as text."""

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


metadata = MetaData()

markets = Table(
    "markets",
    metadata,
    Column("id", String(130), primary_key=True),
    Column("created_at", BigInteger, nullable=False),
    Column("bet_count", Integer, nullable=False, default=0),
    Column("resolved_outcome", Integer),
    Column("resolved_at", BigInteger),
)

bets = Table(
    "bets",
    metadata,
    Column("id", String(150), primary_key=True),
    Column("trader", String(130), nullable=False),
    Column("market", String(130), nullable=False),
    Column("outcome_index", Integer, nullable=False),
    Column("stake", Money, nullable=False),
    Column("fee", Money, nullable=False),
    Column("placed_at", BigInteger, nullable=False),
    Column("state", String(20), nullable=False),
    Column("settled_at", BigInteger),
    Index("ix_bets_market", "market"),
    Index("ix_bets_trader", "trader"),
)


def _totals_columns() -> list[Column]:
    return [
        Column("total_bets", Integer, nullable=False, default=0),
        Column("total_staked", Money, nullable=False),
        Column("total_fees", Money, nullable=False),
        Column("total_staked_settled", Money, nullable=False),
        Column("total_fees_settled", Money, nullable=False),
        Column("total_payout", Money, nullable=False),
    ]


trader_accounts = Table(
    "trader_accounts",
    metadata,
    Column("id", String(130), primary_key=True),
    *_totals_columns(),
    Column("first_active", BigInteger),
    Column("last_active", BigInteger),
)

market_participations = Table(
    "market_participations",
    metadata,
    Column("id", String(270), primary_key=True),
    Column("trader", String(130), nullable=False),
    Column("market", String(130), nullable=False),
    *_totals_columns(),
    Column("created_at", BigInteger, nullable=False),
    Column("last_active", BigInteger),
    Index("ix_participations_trader", "trader"),
)

# Ordered bet ids per participation; row id gives insertion order.
participation_bets = Table(
    "participation_bets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("participation_id", String(270), nullable=False),
    Column("bet_id", String(150), nullable=False),
    Index("ix_participation_bets_pid", "participation_id"),
)

daily_profit_records = Table(
    "daily_profit_records",
    metadata,
    Column("id", String(160), primary_key=True),
    Column("trader", String(130), nullable=False),
    Column("day", BigInteger, nullable=False),
    Column("bet_count", Integer, nullable=False, default=0),
    Column("placed_stake", Money, nullable=False),
    Column("placed_fees", Money, nullable=False),
    Column("payout", Money, nullable=False),
    Column("realized_profit", Money, nullable=False),
    Column("participant_markets", Text, nullable=False),  # JSON list, first-seen order
    Index("ix_daily_trader_day", "trader", "day"),
)

global_stats = Table(
    "global_stats",
    metadata,
    Column("id", String(10), primary_key=True),
    *_totals_columns(),
    Column("total_traders", Integer, nullable=False, default=0),
    Column("markets_resolved", Integer, nullable=False, default=0),
)
