"""Tests for ledger data structures."""

from decimal import Decimal

from predict_ledger.models import (
    INVALID,
    Bet,
    BetState,
    DailyProfitRecord,
    GlobalDelta,
    GlobalStats,
    Market,
    SettledDelta,
    TraderAccount,
)

ZERO = Decimal("0")


class TestSettledDelta:
    def test_total_and_add(self):
        d = SettledDelta(Decimal("10"), Decimal("1")) + SettledDelta(Decimal("5"), Decimal("0.5"))
        assert d.stake == Decimal("15")
        assert d.fees == Decimal("1.5")
        assert d.total == Decimal("16.5")

    def test_fee_only_not_zero(self):
        assert SettledDelta().is_zero()
        assert not SettledDelta(fees=Decimal("1")).is_zero()


class TestBet:
    def _bet(self, state):
        return Bet(
            id="b", trader="t", market="m", outcome_index=0,
            stake=Decimal("3"), fee=Decimal("1"), placed_at=0, state=state,
        )

    def test_placed_flags(self):
        bet = self._bet(BetState.PLACED)
        assert not bet.settled_total
        assert not bet.settled_profit
        assert bet.cost.total == Decimal("4")

    def test_settled_flags_move_together(self):
        for state in (BetState.SETTLED_LOSS, BetState.SETTLED_WIN):
            bet = self._bet(state)
            assert bet.settled_total and bet.settled_profit


class TestMarket:
    def test_unresolved_nothing_loses(self):
        market = Market(id="m", created_at=0)
        assert not market.is_losing(0)
        assert not market.is_losing(1)

    def test_resolved(self):
        market = Market(id="m", created_at=0, resolved_outcome=1)
        assert market.is_losing(0)
        assert not market.is_losing(1)

    def test_invalid_nothing_loses(self):
        market = Market(id="m", created_at=0, resolved_outcome=INVALID)
        assert market.is_invalid
        assert not market.is_losing(0)
        assert not market.is_losing(1)


class TestTotals:
    def test_unsettled(self):
        account = TraderAccount(id="t")
        account.add_placed(Decimal("100"), Decimal("10"))
        account.add_settled(SettledDelta(Decimal("40"), Decimal("4")))

        assert account.total_bets == 1
        assert account.unsettled == SettledDelta(Decimal("60"), Decimal("6"))

    def test_global_apply(self):
        stats = GlobalStats()
        stats.apply(GlobalDelta(traders=1, bets=2, staked=Decimal("5"), fees=Decimal("1")))
        stats.apply(GlobalDelta(settled=SettledDelta(Decimal("5"), Decimal("1")), markets_resolved=1))

        assert stats.total_traders == 1
        assert stats.total_bets == 2
        assert stats.total_staked_settled == Decimal("5")
        assert stats.markets_resolved == 1
        assert stats.unsettled.is_zero()

    def test_empty_delta(self):
        assert GlobalDelta().is_empty()
        assert not GlobalDelta(payout=Decimal("1")).is_empty()


class TestDailyProfitRecord:
    def test_participants_deduplicated_in_order(self):
        record = DailyProfitRecord(id="d", trader="t", day=0)
        record.realize(Decimal("-5"), "m2")
        record.realize(Decimal("3"), "m1")
        record.realize(Decimal("1"), "m2")

        assert record.participant_markets == ["m2", "m1"]
        assert record.realized_profit == Decimal("-1")

    def test_zero_realization_still_records_market(self):
        record = DailyProfitRecord(id="d", trader="t", day=0)
        record.realize(ZERO, "m")
        assert record.participant_markets == ["m"]
