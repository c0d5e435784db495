"""Ledger facade — applies the inbound event stream, one transaction per event.

Events must arrive one at a time in source order. Each is validated, then
processed inside ``engine.begin()``: if anything fails, every write made for
that event is rolled back and the event is counted as failed. Processing of
later events continues either way.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

from sqlalchemy.engine import Engine as SAEngine
from sqlalchemy.exc import SQLAlchemyError

from predict_ledger.capture import record_bet
from predict_ledger.config import LedgerConfig, build_config
from predict_ledger.errors import LedgerError
from predict_ledger.events import (
    BetPlaced,
    EventType,
    LedgerEvent,
    MarketResolved,
    PayoutRedeemed,
    parse_event,
    validate_event,
)
from predict_ledger.models import Bet
from predict_ledger.persistence.db import init_db
from predict_ledger.persistence.store import LedgerStore
from predict_ledger.redemption import RedemptionResult, redeem_payout
from predict_ledger.settlement import SettlementResult, resolve_market
from predict_ledger.utils.logging import setup_logging

log = logging.getLogger("ledger")

EventResult = Union[Bet, SettlementResult, RedemptionResult]


@dataclass
class LedgerStats:
    applied: int = 0
    ignored: int = 0  # valid but filtered: unknown market/trader, duplicate resolution
    failed: int = 0
    by_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "ignored": self.ignored,
            "failed": self.failed,
            "by_type": dict(self.by_type),
        }


class Ledger:
    def __init__(self, engine: SAEngine, config: LedgerConfig | None = None):
        self._engine = engine
        self._config = config or LedgerConfig()
        self._stats = LedgerStats()

    @classmethod
    def from_config(cls, config: LedgerConfig) -> Ledger:
        engine = init_db(config.db_url, sqlite_wal=config.sqlite_wal)
        return cls(engine, config)

    @property
    def engine(self) -> SAEngine:
        return self._engine

    @property
    def stats(self) -> LedgerStats:
        return self._stats

    # ── inbound operations ──

    def record_bet(
        self,
        trader: str,
        market: str,
        outcome_index: int,
        stake: Decimal | int | str,
        fee: Decimal | int | str,
        timestamp: int,
        bet_id: str | None = None,
    ) -> Optional[Bet]:
        """Capture one trade. Without a bet_id a random one is assigned."""
        event = BetPlaced(
            bet_id=bet_id or uuid.uuid4().hex,
            trader=trader,
            market=market,
            outcome_index=outcome_index,
            stake=stake,  # type: ignore[arg-type]
            fee=fee,  # type: ignore[arg-type]
            timestamp=timestamp,
        )
        return self.apply(event)  # type: ignore[return-value]

    def resolve_market(self, market: str, outcome: int, timestamp: int) -> Optional[SettlementResult]:
        return self.apply(MarketResolved(market=market, outcome=outcome, timestamp=timestamp))  # type: ignore[return-value]

    def redeem_payout(
        self, trader: str, market: str, payout: Decimal | int | str, timestamp: int
    ) -> Optional[RedemptionResult]:
        event = PayoutRedeemed(trader=trader, market=market, payout=payout, timestamp=timestamp)  # type: ignore[arg-type]
        return self.apply(event)  # type: ignore[return-value]

    # ── event stream ──

    def apply(self, event: LedgerEvent | Mapping[str, Any]) -> Optional[EventResult]:
        """Validate and process one event atomically. Returns None if it failed."""
        try:
            if isinstance(event, Mapping):
                event = parse_event(event, self._config.outcome_slots)
            else:
                event = validate_event(event, self._config.outcome_slots)
            with self._engine.begin() as conn:
                result = self._dispatch(LedgerStore(conn), event)
        except (LedgerError, SQLAlchemyError) as e:
            self._stats.failed += 1
            log.error("LEDGER │ event skipped (%s): %s", _describe(event), e)
            return None

        key = event.type.value
        self._stats.by_type[key] = self._stats.by_type.get(key, 0) + 1
        if isinstance(result, (SettlementResult, RedemptionResult)) and not result.applied:
            self._stats.ignored += 1
        else:
            self._stats.applied += 1
        return result

    def replay(self, events: Iterable[LedgerEvent | Mapping[str, Any]]) -> LedgerStats:
        """Apply events in order; failures are logged and skipped."""
        for event in events:
            self.apply(event)
        log.info("LEDGER │ replay done: %s", self._stats.to_dict())
        return self._stats

    def _dispatch(self, store: LedgerStore, event: LedgerEvent) -> EventResult:
        if event.type is EventType.BET_PLACED:
            return record_bet(
                store,
                event.bet_id,
                event.trader,
                event.market,
                event.outcome_index,
                event.stake,
                event.fee,
                event.timestamp,
            )
        if event.type is EventType.MARKET_RESOLVED:
            return resolve_market(
                store,
                event.market,
                event.outcome,
                event.timestamp,
                duplicate_log_level=self._config.duplicate_log_level,
            )
        return redeem_payout(store, event.trader, event.market, event.payout, event.timestamp)


def _describe(event: Any) -> str:
    if isinstance(event, Mapping):
        return str(event.get("type", "?"))
    return type(event).__name__


def build_ledger(config_path: Path | None = None) -> Ledger:
    """Load config, set up logging, open the database and return a ready Ledger."""
    config = build_config(config_path)
    setup_logging(config.verbose)
    return Ledger.from_config(config)
