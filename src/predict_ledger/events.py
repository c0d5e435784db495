"""Inbound ledger events and their validation.

The ingestion layer hands over one of three events, in source-chain order.
``parse_event`` turns a raw mapping into a typed event, normalizing ids and
amounts; anything it cannot accept raises InvalidEventError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union

from predict_ledger.errors import InvalidEventError
from predict_ledger.ids import normalize_id
from predict_ledger.models import INVALID

BINARY_OUTCOME_SLOTS = 2

# Largest value a BIGINT column holds
MAX_TIMESTAMP = 2**63 - 1


class EventType(str, Enum):
    BET_PLACED = "bet_placed"
    MARKET_RESOLVED = "market_resolved"
    PAYOUT_REDEEMED = "payout_redeemed"


@dataclass(frozen=True)
class BetPlaced:
    bet_id: str
    trader: str
    market: str
    outcome_index: int
    stake: Decimal
    fee: Decimal
    timestamp: int

    type = EventType.BET_PLACED


@dataclass(frozen=True)
class MarketResolved:
    market: str
    outcome: int  # winning index, or INVALID
    timestamp: int

    type = EventType.MARKET_RESOLVED


@dataclass(frozen=True)
class PayoutRedeemed:
    trader: str
    market: str
    payout: Decimal
    timestamp: int

    type = EventType.PAYOUT_REDEEMED


LedgerEvent = Union[BetPlaced, MarketResolved, PayoutRedeemed]


def outcome_from_payouts(payouts: Sequence[Any]) -> int:
    """Winning index from an oracle payout vector; INVALID when no side pays more."""
    if isinstance(payouts, (str, bytes)) or not isinstance(payouts, Sequence):
        raise InvalidEventError(f"payouts must be a list of amounts, got {payouts!r}")
    if len(payouts) < 2:
        return INVALID
    p0, p1 = to_amount(payouts[0], "payouts[0]"), to_amount(payouts[1], "payouts[1]")
    if p1 > p0:
        return 1
    if p0 > p1:
        return 0
    return INVALID


def to_amount(value: Any, name: str) -> Decimal:
    """Parse a non-negative Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, bool):
        raise InvalidEventError(f"{name} must be a number, got {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidEventError(f"{name} must be a number, got {value!r}") from e
    if not amount.is_finite():
        raise InvalidEventError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidEventError(f"{name} must be >= 0, got {amount}")
    return amount


def _to_int(value: Any, name: str) -> int:
    """Parse an integer. Floats and Decimals must have no fractional part."""
    if isinstance(value, bool):
        raise InvalidEventError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidEventError(f"{name} must be an integer, got {value!r}") from e
    if isinstance(value, (float, Decimal)) and value != number:
        raise InvalidEventError(f"{name} must be an integer, got {value!r}")
    return number


def to_timestamp(value: Any, name: str = "timestamp") -> int:
    ts = _to_int(value, name)
    if ts < 0:
        raise InvalidEventError(f"{name} must be >= 0, got {ts}")
    if ts > MAX_TIMESTAMP:
        raise InvalidEventError(f"{name} out of range, got {ts}")
    return ts


def to_outcome(value: Any, outcome_slots: int, allow_invalid: bool = False) -> int:
    index = _to_int(value, "outcome")
    if allow_invalid and index == INVALID:
        return index
    if not (0 <= index < outcome_slots):
        raise InvalidEventError(f"outcome {index} outside [0, {outcome_slots})")
    return index


def parse_event(raw: Mapping[str, Any], outcome_slots: int = BINARY_OUTCOME_SLOTS) -> LedgerEvent:
    """Build a typed event from a raw mapping with a ``type`` key."""
    try:
        event_type = EventType(raw.get("type"))
    except ValueError as e:
        raise InvalidEventError(f"unknown event type {raw.get('type')!r}") from e

    try:
        if event_type is EventType.BET_PLACED:
            return BetPlaced(
                bet_id=normalize_id(raw["bet_id"]),
                trader=normalize_id(raw["trader"]),
                market=normalize_id(raw["market"]),
                outcome_index=to_outcome(raw["outcome_index"], outcome_slots),
                stake=to_amount(raw["stake"], "stake"),
                fee=to_amount(raw.get("fee", 0), "fee"),
                timestamp=to_timestamp(raw["timestamp"]),
            )
        if event_type is EventType.MARKET_RESOLVED:
            if "payouts" in raw and "outcome" not in raw:
                outcome = outcome_from_payouts(raw["payouts"])
            else:
                outcome = to_outcome(raw["outcome"], outcome_slots, allow_invalid=True)
            return MarketResolved(
                market=normalize_id(raw["market"]),
                outcome=outcome,
                timestamp=to_timestamp(raw["timestamp"]),
            )
        return PayoutRedeemed(
            trader=normalize_id(raw["trader"]),
            market=normalize_id(raw["market"]),
            payout=to_amount(raw["payout"], "payout"),
            timestamp=to_timestamp(raw["timestamp"]),
        )
    except KeyError as e:
        raise InvalidEventError(f"{event_type.value} event missing field {e.args[0]!r}") from e


def validate_event(event: LedgerEvent, outcome_slots: int = BINARY_OUTCOME_SLOTS) -> LedgerEvent:
    """Re-check an already-typed event and return it with canonical ids."""
    if isinstance(event, BetPlaced):
        return BetPlaced(
            bet_id=normalize_id(event.bet_id),
            trader=normalize_id(event.trader),
            market=normalize_id(event.market),
            outcome_index=to_outcome(event.outcome_index, outcome_slots),
            stake=to_amount(event.stake, "stake"),
            fee=to_amount(event.fee, "fee"),
            timestamp=to_timestamp(event.timestamp),
        )
    if isinstance(event, MarketResolved):
        return MarketResolved(
            market=normalize_id(event.market),
            outcome=to_outcome(event.outcome, outcome_slots, allow_invalid=True),
            timestamp=to_timestamp(event.timestamp),
        )
    if isinstance(event, PayoutRedeemed):
        return PayoutRedeemed(
            trader=normalize_id(event.trader),
            market=normalize_id(event.market),
            payout=to_amount(event.payout, "payout"),
            timestamp=to_timestamp(event.timestamp),
        )
    raise InvalidEventError(f"unsupported event {type(event).__name__}")
