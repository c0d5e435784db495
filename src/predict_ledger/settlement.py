"""Settlement processor — realizes losing bets when a market resolves.

Winning bets are left PLACED; their result is only known once the trader
redeems (see redemption.py). On an INVALID market nothing loses, so the whole
market waits for redemption.

All aggregates touched while walking the market's bets go through BatchCache,
so storage traffic scales with the number of distinct traders/days, not bets:

    1 load of the market's bets
    ≤ 1 load + 1 write per trader, participation and (trader, day)
    1 bulk update of the losing bets
    1 read-modify-write of GlobalStats
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from predict_ledger.aggregation import daily_record_factory, day_timestamp
from predict_ledger.cache import BatchCache
from predict_ledger.ids import daily_id, participation_id
from predict_ledger.models import (
    INVALID,
    BetState,
    DailyProfitRecord,
    GlobalDelta,
    MarketParticipation,
    SettledDelta,
    TraderAccount,
)
from predict_ledger.persistence.store import LedgerStore

log = logging.getLogger("ledger.settlement")


@dataclass
class SettlementResult:
    market: str
    applied: bool
    skip_reason: str | None = None
    outcome: int | None = None
    bets_seen: int = 0
    bets_lost: int = 0
    bets_pending: int = 0
    settled: SettledDelta = field(default_factory=SettledDelta)
    traders_touched: int = 0
    days_touched: int = 0


def resolve_market(
    store: LedgerStore,
    market_id: str,
    outcome: int,
    timestamp: int,
    duplicate_log_level: int = logging.WARNING,
) -> SettlementResult:
    """Record the market's outcome once and realize every losing bet."""
    market = store.get_market(market_id)
    if market is None:
        log.debug("SETTLE │ unknown market %s — ignored", market_id)
        return SettlementResult(market=market_id, applied=False, skip_reason="unknown_market")

    if market.is_resolved:
        log.log(
            duplicate_log_level,
            "SETTLE │ market %s already resolved to %s at %s — ignoring outcome %s",
            market_id, market.resolved_outcome, market.resolved_at, outcome,
        )
        return SettlementResult(
            market=market_id, applied=False, skip_reason="already_resolved",
            outcome=market.resolved_outcome,
        )

    market.resolved_outcome = outcome
    market.resolved_at = timestamp
    store.save_market(market)

    traders: BatchCache[str, TraderAccount] = BatchCache(
        store.get_trader, store.save_trader, name="traders"
    )
    participations: BatchCache[str, MarketParticipation] = BatchCache(
        store.get_participation, store.save_participation, name="participations"
    )
    dailies: BatchCache[str, DailyProfitRecord] = BatchCache(
        store.get_daily, store.save_daily, name="daily"
    )
    global_delta = GlobalDelta(markets_resolved=1)
    result = SettlementResult(market=market_id, applied=True, outcome=outcome)
    settlement_day = day_timestamp(timestamp)
    lost_ids: list[str] = []

    for bet in store.bets_for_market(market_id):
        result.bets_seen += 1
        if not market.is_losing(bet.outcome_index):
            result.bets_pending += 1
            continue
        if bet.state is not BetState.PLACED:
            continue

        account = traders.get(bet.trader)
        if account is None:
            log.debug("SETTLE │ bet %s has no trader account — skipped", bet.id)
            continue

        cost = bet.cost
        account.add_settled(cost)
        participation = participations.get(participation_id(bet.trader, market_id))
        if participation is not None:
            participation.add_settled(cost)
        global_delta.settled = global_delta.settled + cost

        daily = dailies.get_or_create(
            daily_id(bet.trader, settlement_day),
            daily_record_factory(bet.trader, timestamp),
        )
        daily.realize(-cost.total, market_id)

        lost_ids.append(bet.id)
        result.settled = result.settled + cost

    result.bets_lost = store.set_bet_states(lost_ids, BetState.SETTLED_LOSS, timestamp)
    result.traders_touched = traders.commit()
    participations.commit()
    result.days_touched = dailies.commit()
    store.apply_global_delta(global_delta)

    log.info(
        "SETTLE │ %s → %s: %d bets, %d lost (%s), %d pending, %d traders",
        market_id,
        "INVALID" if outcome == INVALID else outcome,
        result.bets_seen,
        result.bets_lost,
        result.settled.total,
        result.bets_pending,
        result.traders_touched,
    )
    return result
