"""Tests for the redemption processor."""

from decimal import Decimal

from conftest import DAY, MARKET, OTHER_MARKET, OTHER_TRADER, START_TS, TRADER, ZERO

from predict_ledger.models import BetState
from predict_ledger.persistence import queries


class TestRedeem:
    def test_unknown_participation_ignored(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 100, 0, START_TS, bet_id="b1")

        result = ledger.redeem_payout(OTHER_TRADER, MARKET, 100, START_TS + DAY)

        assert result.applied is False
        assert result.skip_reason == "unknown_participation"
        assert queries.get_trader_account(OTHER_TRADER, engine) is None
        assert queries.get_global_stats(engine).total_payout == ZERO
        assert ledger.stats.ignored == 1

    def test_unknown_market_for_known_trader_ignored(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 100, 0, START_TS, bet_id="b1")

        result = ledger.redeem_payout(TRADER, OTHER_MARKET, 100, START_TS + DAY)

        assert result.skip_reason == "unknown_participation"
        assert queries.get_trader_account(TRADER, engine).total_payout == ZERO

    def test_payout_booked_at_every_tier(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 1000, 100, START_TS, bet_id="b1")
        ledger.resolve_market(MARKET, 0, START_TS + DAY)

        ledger.redeem_payout(TRADER, MARKET, 2500, START_TS + 2 * DAY)

        assert queries.get_trader_account(TRADER, engine).total_payout == Decimal("2500")
        participation = queries.get_participation(TRADER, MARKET, engine)
        assert participation.total_payout == Decimal("2500")
        assert participation.unsettled.is_zero()
        assert participation.last_active == START_TS + 2 * DAY
        stats = queries.get_global_stats(engine)
        assert stats.total_payout == Decimal("2500")
        assert stats.total_staked_settled == Decimal("1000")
        assert stats.total_fees_settled == Decimal("100")

    def test_second_claim_books_only_payout(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 1000, 0, START_TS, bet_id="b1")
        ledger.resolve_market(MARKET, 0, START_TS + DAY)
        ledger.redeem_payout(TRADER, MARKET, 1500, START_TS + 2 * DAY)

        second = ledger.redeem_payout(TRADER, MARKET, 300, START_TS + 2 * DAY + 60)

        assert second.applied
        assert second.settled.is_zero()
        assert second.bets_settled == 0
        assert second.net_profit == Decimal("300")
        account = queries.get_trader_account(TRADER, engine)
        assert account.total_staked_settled == Decimal("1000")
        assert account.total_payout == Decimal("1800")
        daily = queries.get_daily_record(TRADER, START_TS + 2 * DAY, engine)
        assert daily.realized_profit == Decimal("800")
        assert daily.payout == Decimal("1800")
        assert daily.participant_markets == [MARKET]

    def test_redeem_before_resolution_settles_everything(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 400, 0, START_TS, bet_id="b1")
        ledger.record_bet(TRADER, MARKET, 1, 600, 0, START_TS, bet_id="b2")

        result = ledger.redeem_payout(TRADER, MARKET, 1000, START_TS + DAY)

        assert result.bets_settled == 2
        assert result.net_profit == ZERO
        assert queries.get_bet("b1", engine).state is BetState.SETTLED_WIN
        assert queries.get_bet("b2", engine).state is BetState.SETTLED_WIN

        # Nothing left for settlement to realize
        settle = ledger.resolve_market(MARKET, 0, START_TS + 2 * DAY)
        assert settle.bets_lost == 0
        assert queries.get_trader_account(TRADER, engine).total_staked_settled == Decimal("1000")

    def test_fee_only_remainder_settled_once(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 0, 20, START_TS, bet_id="b1")
        ledger.resolve_market(MARKET, 0, START_TS + DAY)

        result = ledger.redeem_payout(TRADER, MARKET, 0, START_TS + DAY)

        assert result.settled.fees == Decimal("20")
        assert result.net_profit == Decimal("-20")
        stats = queries.get_global_stats(engine)
        assert stats.total_fees_settled == Decimal("20")

        ledger.redeem_payout(TRADER, MARKET, 0, START_TS + DAY)
        assert queries.get_global_stats(engine).total_fees_settled == Decimal("20")

    def test_settled_at_is_redemption_time(self, ledger, engine):
        ledger.record_bet(TRADER, MARKET, 0, 100, 0, START_TS, bet_id="b1")
        ledger.resolve_market(MARKET, 0, START_TS + DAY)
        ledger.redeem_payout(TRADER, MARKET, 150, START_TS + 3 * DAY)

        assert queries.get_bet("b1", engine).settled_at == START_TS + 3 * DAY
