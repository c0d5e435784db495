"""Keyed read access to ledger entities for the reporting layer."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Engine as SAEngine

from predict_ledger.aggregation import day_timestamp
from predict_ledger.ids import daily_id, normalize_id, participation_id
from predict_ledger.models import (
    Bet,
    DailyProfitRecord,
    GlobalStats,
    Market,
    MarketParticipation,
    TraderAccount,
)
from predict_ledger.persistence.db import get_engine
from predict_ledger.persistence.store import LedgerStore


def _store_call(engine: SAEngine | None, fn):
    with (engine or get_engine()).connect() as conn:
        return fn(LedgerStore(conn))


def get_bet(bet_id: str, engine: SAEngine | None = None) -> Optional[Bet]:
    return _store_call(engine, lambda s: s.get_bet(normalize_id(bet_id)))


def get_market(market: str, engine: SAEngine | None = None) -> Optional[Market]:
    return _store_call(engine, lambda s: s.get_market(normalize_id(market)))


def get_trader_account(trader: str, engine: SAEngine | None = None) -> Optional[TraderAccount]:
    return _store_call(engine, lambda s: s.get_trader(normalize_id(trader)))


def get_participation(
    trader: str, market: str, engine: SAEngine | None = None
) -> Optional[MarketParticipation]:
    pid = participation_id(normalize_id(trader), normalize_id(market))
    return _store_call(engine, lambda s: s.get_participation(pid))


def get_participation_bets(trader: str, market: str, engine: SAEngine | None = None) -> list[str]:
    """Bet ids of a trader in one market, in placement order."""
    pid = participation_id(normalize_id(trader), normalize_id(market))
    return _store_call(engine, lambda s: s.participation_bet_ids(pid))


def get_daily_record(
    trader: str, timestamp: int, engine: SAEngine | None = None
) -> Optional[DailyProfitRecord]:
    """Daily record for the UTC day containing timestamp."""
    rid = daily_id(normalize_id(trader), day_timestamp(timestamp))
    return _store_call(engine, lambda s: s.get_daily(rid))


def list_daily_records(
    trader: str,
    from_ts: int | None = None,
    to_ts: int | None = None,
    engine: SAEngine | None = None,
) -> list[DailyProfitRecord]:
    from_day = day_timestamp(from_ts) if from_ts is not None else None
    to_day = day_timestamp(to_ts) if to_ts is not None else None
    return _store_call(
        engine, lambda s: s.daily_records_for_trader(normalize_id(trader), from_day, to_day)
    )


def get_global_stats(engine: SAEngine | None = None) -> GlobalStats:
    return _store_call(engine, lambda s: s.get_global())
