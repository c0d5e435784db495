"""Redemption processor — books a trader's payout claim for one market.

Whatever part of the trader's stake in the market is still unsettled at this
point is, by construction, the winning side (or everything, for an INVALID
market): settlement already moved every losing bet. That remainder is settled
here and the day's profit is ``payout - remainder``.

Calling again for the same market finds nothing left to settle, so only the
new payout is booked. Traders may redeem in several claims.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from predict_ledger.aggregation import get_or_create_daily
from predict_ledger.ids import participation_id
from predict_ledger.models import ZERO, BetState, GlobalDelta, SettledDelta
from predict_ledger.persistence.store import LedgerStore

log = logging.getLogger("ledger.redemption")


@dataclass
class RedemptionResult:
    trader: str
    market: str
    applied: bool
    skip_reason: str | None = None
    payout: Decimal = ZERO
    settled: SettledDelta = field(default_factory=SettledDelta)
    net_profit: Decimal = ZERO
    bets_settled: int = 0


def redeem_payout(
    store: LedgerStore,
    trader_id: str,
    market_id: str,
    payout: Decimal,
    timestamp: int,
) -> RedemptionResult:
    account = store.get_trader(trader_id)
    pid = participation_id(trader_id, market_id)
    participation = store.get_participation(pid)
    if account is None or participation is None:
        log.debug("REDEEM │ no participation for %s in %s — ignored", trader_id, market_id)
        return RedemptionResult(
            trader=trader_id, market=market_id, applied=False, skip_reason="unknown_participation",
        )

    unsettled = participation.unsettled
    global_delta = GlobalDelta(payout=payout)
    if not unsettled.is_zero():
        account.add_settled(unsettled)
        participation.add_settled(unsettled)
        global_delta.settled = unsettled

    account.add_payout(payout)
    participation.add_payout(payout)
    account.last_active = timestamp
    participation.last_active = timestamp

    pending = store.pending_participation_bet_ids(pid)
    bets_settled = store.set_bet_states(pending, BetState.SETTLED_WIN, timestamp)

    net_profit = payout - unsettled.total
    daily = get_or_create_daily(store.get_daily, trader_id, timestamp)
    daily.payout += payout
    daily.realize(net_profit, market_id)

    store.save_trader(account)
    store.save_participation(participation)
    store.save_daily(daily)
    store.apply_global_delta(global_delta)

    log.info(
        "REDEEM │ %s in %s: payout=%s settled=%s net=%s (%d bets)",
        trader_id, market_id, payout, unsettled.total, net_profit, bets_settled,
    )
    return RedemptionResult(
        trader=trader_id,
        market=market_id,
        applied=True,
        payout=payout,
        settled=unsettled,
        net_profit=net_profit,
        bets_settled=bets_settled,
    )
