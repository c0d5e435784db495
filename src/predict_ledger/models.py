"""Data structures for the prediction-market ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")

# Resolved outcome for a market where no side wins (equal payouts).
INVALID = -1

GLOBAL_ID = ""


class BetState(str, Enum):
    PLACED = "placed"
    SETTLED_LOSS = "settled_loss"  # realized at market resolution
    SETTLED_WIN = "settled_win"  # realized at payout redemption


@dataclass(frozen=True)
class SettledDelta:
    """Stake and fees moving from placed to settled. Always move together."""

    stake: Decimal = ZERO
    fees: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.stake + self.fees

    def is_zero(self) -> bool:
        return self.stake == ZERO and self.fees == ZERO

    def __add__(self, other: SettledDelta) -> SettledDelta:
        return SettledDelta(stake=self.stake + other.stake, fees=self.fees + other.fees)


@dataclass
class Bet:
    id: str
    trader: str
    market: str
    outcome_index: int
    stake: Decimal
    fee: Decimal
    placed_at: int
    state: BetState = BetState.PLACED
    settled_at: Optional[int] = None

    @property
    def cost(self) -> SettledDelta:
        return SettledDelta(stake=self.stake, fees=self.fee)

    @property
    def settled_total(self) -> bool:
        return self.state is not BetState.PLACED

    @property
    def settled_profit(self) -> bool:
        return self.state is not BetState.PLACED


@dataclass
class Market:
    id: str
    created_at: int
    bet_count: int = 0
    resolved_outcome: Optional[int] = None
    resolved_at: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_outcome is not None

    @property
    def is_invalid(self) -> bool:
        return self.resolved_outcome == INVALID

    def is_losing(self, outcome_index: int) -> bool:
        """True when a bet on outcome_index lost. Nothing loses on an INVALID market."""
        if not self.is_resolved or self.is_invalid:
            return False
        return outcome_index != self.resolved_outcome


@dataclass(kw_only=True)
class Totals:
    """Placed/settled/payout counters shared by trader, participation and global tiers."""

    total_bets: int = 0
    total_staked: Decimal = ZERO
    total_fees: Decimal = ZERO
    total_staked_settled: Decimal = ZERO
    total_fees_settled: Decimal = ZERO
    total_payout: Decimal = ZERO

    @property
    def unsettled(self) -> SettledDelta:
        return SettledDelta(
            stake=self.total_staked - self.total_staked_settled,
            fees=self.total_fees - self.total_fees_settled,
        )

    def add_placed(self, stake: Decimal, fee: Decimal) -> None:
        self.total_bets += 1
        self.total_staked += stake
        self.total_fees += fee

    def add_settled(self, delta: SettledDelta) -> None:
        self.total_staked_settled += delta.stake
        self.total_fees_settled += delta.fees

    def add_payout(self, amount: Decimal) -> None:
        self.total_payout += amount


@dataclass(kw_only=True)
class TraderAccount(Totals):
    id: str
    first_active: Optional[int] = None
    last_active: Optional[int] = None


@dataclass(kw_only=True)
class MarketParticipation(Totals):
    id: str
    trader: str
    market: str
    created_at: int
    last_active: Optional[int] = None


@dataclass(kw_only=True)
class GlobalStats(Totals):
    id: str = GLOBAL_ID
    total_traders: int = 0
    markets_resolved: int = 0

    def apply(self, delta: GlobalDelta) -> None:
        self.total_traders += delta.traders
        self.total_bets += delta.bets
        self.total_staked += delta.staked
        self.total_fees += delta.fees
        self.add_settled(delta.settled)
        self.total_payout += delta.payout
        self.markets_resolved += delta.markets_resolved


@dataclass
class GlobalDelta:
    """Accumulated change to GlobalStats, applied once per event."""

    traders: int = 0
    bets: int = 0
    staked: Decimal = ZERO
    fees: Decimal = ZERO
    settled: SettledDelta = field(default_factory=SettledDelta)
    payout: Decimal = ZERO
    markets_resolved: int = 0

    def is_empty(self) -> bool:
        return (
            self.traders == 0
            and self.bets == 0
            and self.staked == ZERO
            and self.fees == ZERO
            and self.settled.is_zero()
            and self.payout == ZERO
            and self.markets_resolved == 0
        )


@dataclass
class DailyProfitRecord:
    id: str
    trader: str
    day: int
    bet_count: int = 0
    placed_stake: Decimal = ZERO
    placed_fees: Decimal = ZERO
    payout: Decimal = ZERO
    realized_profit: Decimal = ZERO
    participant_markets: list[str] = field(default_factory=list)

    def add_participant(self, market: str) -> None:
        if market not in self.participant_markets:
            self.participant_markets.append(market)

    def realize(self, amount: Decimal, market: str) -> None:
        """Book realized profit (negative for a loss) attributed to market."""
        self.realized_profit += amount
        self.add_participant(market)
