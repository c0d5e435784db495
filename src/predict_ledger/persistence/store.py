"""Keyed load/save of ledger entities on one connection.

A LedgerStore never opens or commits a transaction itself; the caller owns the
connection (``engine.begin()`` in the Ledger facade), so every write made while
processing one event commits or rolls back together.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import asdict
from typing import Optional

from sqlalchemy import Table, select
from sqlalchemy.engine import Connection

from predict_ledger.models import (
    GLOBAL_ID,
    Bet,
    BetState,
    DailyProfitRecord,
    GlobalDelta,
    GlobalStats,
    Market,
    MarketParticipation,
    TraderAccount,
)
from predict_ledger.persistence.schema import (
    bets,
    daily_profit_records,
    global_stats,
    market_participations,
    markets,
    participation_bets,
    trader_accounts,
)


class LedgerStore:
    def __init__(self, conn: Connection):
        self._conn = conn

    # ── generic helpers ──

    def _load(self, table: Table, record_id: str) -> Optional[dict]:
        row = self._conn.execute(select(table).where(table.c.id == record_id)).first()
        return dict(row._mapping) if row is not None else None

    def _upsert(self, table: Table, values: dict) -> None:
        """Update by id, insert when no row matched."""
        record_id = values["id"]
        result = self._conn.execute(
            table.update().where(table.c.id == record_id).values(**values)
        )
        if result.rowcount == 0:
            self._conn.execute(table.insert().values(**values))

    # ── bets ──

    def get_bet(self, bet_id: str) -> Optional[Bet]:
        row = self._load(bets, bet_id)
        return _bet_from_row(row) if row else None

    def insert_bet(self, bet: Bet) -> None:
        values = asdict(bet)
        values["state"] = bet.state.value
        self._conn.execute(bets.insert().values(**values))

    def bets_for_market(self, market_id: str) -> list[Bet]:
        result = self._conn.execute(
            select(bets).where(bets.c.market == market_id).order_by(bets.c.placed_at, bets.c.id)
        )
        return [_bet_from_row(dict(r._mapping)) for r in result]

    def set_bet_states(self, bet_ids: Iterable[str], state: BetState, settled_at: int) -> int:
        """Move PLACED bets to a settled state in one statement. Returns rows changed."""
        ids = list(bet_ids)
        if not ids:
            return 0
        result = self._conn.execute(
            bets.update()
            .where(bets.c.id.in_(ids))
            .where(bets.c.state == BetState.PLACED.value)
            .values(state=state.value, settled_at=settled_at)
        )
        return result.rowcount

    # ── markets ──

    def get_market(self, market_id: str) -> Optional[Market]:
        row = self._load(markets, market_id)
        return Market(**row) if row else None

    def save_market(self, market: Market) -> None:
        self._upsert(markets, asdict(market))

    # ── traders ──

    def get_trader(self, trader_id: str) -> Optional[TraderAccount]:
        row = self._load(trader_accounts, trader_id)
        return TraderAccount(**row) if row else None

    def save_trader(self, account: TraderAccount) -> None:
        self._upsert(trader_accounts, asdict(account))

    # ── participations ──

    def get_participation(self, pid: str) -> Optional[MarketParticipation]:
        row = self._load(market_participations, pid)
        return MarketParticipation(**row) if row else None

    def save_participation(self, participation: MarketParticipation) -> None:
        self._upsert(market_participations, asdict(participation))

    def append_participation_bet(self, pid: str, bet_id: str) -> None:
        self._conn.execute(participation_bets.insert().values(participation_id=pid, bet_id=bet_id))

    def participation_bet_ids(self, pid: str) -> list[str]:
        result = self._conn.execute(
            select(participation_bets.c.bet_id)
            .where(participation_bets.c.participation_id == pid)
            .order_by(participation_bets.c.id)
        )
        return [r.bet_id for r in result]

    def pending_participation_bet_ids(self, pid: str) -> list[str]:
        """Bet ids from the participation's list that are still PLACED."""
        result = self._conn.execute(
            select(participation_bets.c.bet_id)
            .join(bets, bets.c.id == participation_bets.c.bet_id)
            .where(participation_bets.c.participation_id == pid)
            .where(bets.c.state == BetState.PLACED.value)
            .order_by(participation_bets.c.id)
        )
        return [r.bet_id for r in result]

    # ── daily records ──

    def get_daily(self, record_id: str) -> Optional[DailyProfitRecord]:
        row = self._load(daily_profit_records, record_id)
        return _daily_from_row(row) if row else None

    def save_daily(self, record: DailyProfitRecord) -> None:
        values = asdict(record)
        values["participant_markets"] = json.dumps(record.participant_markets)
        self._upsert(daily_profit_records, values)

    def daily_records_for_trader(
        self, trader: str, from_day: int | None = None, to_day: int | None = None
    ) -> list[DailyProfitRecord]:
        q = (
            select(daily_profit_records)
            .where(daily_profit_records.c.trader == trader)
            .order_by(daily_profit_records.c.day)
        )
        if from_day is not None:
            q = q.where(daily_profit_records.c.day >= from_day)
        if to_day is not None:
            q = q.where(daily_profit_records.c.day <= to_day)
        return [_daily_from_row(dict(r._mapping)) for r in self._conn.execute(q)]

    # ── global ──

    def get_global(self) -> GlobalStats:
        row = self._load(global_stats, GLOBAL_ID)
        return GlobalStats(**row) if row else GlobalStats()

    def apply_global_delta(self, delta: GlobalDelta) -> GlobalStats:
        """Load the singleton, apply one accumulated delta, write it back."""
        stats = self.get_global()
        if delta.is_empty():
            return stats
        stats.apply(delta)
        self._upsert(global_stats, asdict(stats))
        return stats


def _bet_from_row(row: dict) -> Bet:
    row["state"] = BetState(row["state"])
    return Bet(**row)


def _daily_from_row(row: dict) -> DailyProfitRecord:
    row["participant_markets"] = json.loads(row["participant_markets"] or "[]")
    return DailyProfitRecord(**row)
