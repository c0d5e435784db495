"""Bet capture — records a trade and its placed totals. Knows nothing about win/loss."""

from __future__ import annotations

import logging
from decimal import Decimal

from predict_ledger.aggregation import get_or_create_daily
from predict_ledger.errors import DuplicateBetError
from predict_ledger.ids import participation_id
from predict_ledger.models import (
    Bet,
    GlobalDelta,
    Market,
    MarketParticipation,
    TraderAccount,
)
from predict_ledger.persistence.store import LedgerStore

log = logging.getLogger("ledger.capture")


def record_bet(
    store: LedgerStore,
    bet_id: str,
    trader: str,
    market: str,
    outcome_index: int,
    stake: Decimal,
    fee: Decimal,
    timestamp: int,
) -> Bet:
    """Create a PLACED bet and add its stake/fee to every placed tally.

    The market and trader records are created on first sight. Raises
    DuplicateBetError if bet_id is already in the ledger.
    """
    if store.get_bet(bet_id) is not None:
        raise DuplicateBetError(f"bet {bet_id} already recorded")

    delta = GlobalDelta(bets=1, staked=stake, fees=fee)

    mkt = store.get_market(market)
    if mkt is None:
        mkt = Market(id=market, created_at=timestamp)
    mkt.bet_count += 1

    account = store.get_trader(trader)
    if account is None:
        account = TraderAccount(id=trader)
    if account.first_active is None:
        account.first_active = timestamp
        delta.traders = 1
    account.last_active = timestamp
    account.add_placed(stake, fee)

    pid = participation_id(trader, market)
    participation = store.get_participation(pid)
    if participation is None:
        participation = MarketParticipation(id=pid, trader=trader, market=market, created_at=timestamp)
    participation.add_placed(stake, fee)
    participation.last_active = timestamp

    daily = get_or_create_daily(store.get_daily, trader, timestamp)
    daily.bet_count += 1
    daily.placed_stake += stake
    daily.placed_fees += fee

    bet = Bet(
        id=bet_id,
        trader=trader,
        market=market,
        outcome_index=outcome_index,
        stake=stake,
        fee=fee,
        placed_at=timestamp,
    )

    store.save_market(mkt)
    store.save_trader(account)
    store.save_participation(participation)
    store.append_participation_bet(pid, bet_id)
    store.save_daily(daily)
    store.insert_bet(bet)
    store.apply_global_delta(delta)

    log.debug(
        "BET │ %s %s on %s outcome=%d stake=%s fee=%s",
        bet_id, trader, market, outcome_index, stake, fee,
    )
    return bet
