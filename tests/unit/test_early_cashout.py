"""Tests for pl_settlement.domain.early_cashout."""

import time
from decimal import Decimal

from src.pl_common.enums import CashOutDirection, RoundingDirection
from src.pl_ledger.domain.models import PlayerPosition
from src.pl_settlement.domain.early_cashout import calculate_early_cash_out


def _player(chips: int | Decimal, buy_ins: int = 0, cash_outs: int = 0) -> PlayerPosition:
    return PlayerPosition(player_id="p1", player_name="Alice", total_buy_ins=buy_ins,
                          total_cash_outs=cash_outs, current_chips=chips)  # type: ignore[arg-type]


class TestEarlyCashOut:
    def test_winner_bank_short(self) -> None:
        # chips $150 on a $100 buy-in, bank holds only $40
        result = calculate_early_cash_out(_player(15000, buy_ins=10000), 4000)
        assert result.net_position == 5000
        assert result.settlement_amount == 5000
        assert result.direction == CashOutDirection.OWED
        assert result.can_payout is False
        assert result.bank_balance_before == 4000
        assert result.bank_balance_after == 4000  # blocked payout leaves the bank alone

    def test_winner_bank_sufficient(self) -> None:
        result = calculate_early_cash_out(_player(15000, buy_ins=10000), 30000)
        assert result.can_payout is True
        assert result.bank_balance_after == 25000

    def test_bank_exactly_enough(self) -> None:
        result = calculate_early_cash_out(_player(15000, buy_ins=10000), 5000)
        assert result.can_payout is True
        assert result.bank_balance_after == 0

    def test_loser_owes(self) -> None:
        result = calculate_early_cash_out(_player(3000, buy_ins=10000), 0)
        assert result.net_position == -7000
        assert result.settlement_amount == 7000
        assert result.direction == CashOutDirection.OWES
        assert result.can_payout is True
        assert result.bank_balance_after == 7000

    def test_loser_beyond_bank_is_not_an_error(self) -> None:
        result = calculate_early_cash_out(_player(0, buy_ins=1_000_000), 100)
        assert result.direction == CashOutDirection.OWES
        assert result.settlement_amount == 1_000_000

    def test_break_even_is_owed_zero(self) -> None:
        result = calculate_early_cash_out(_player(10000, buy_ins=10000), 0)
        assert result.net_position == 0
        assert result.settlement_amount == 0
        assert result.direction == CashOutDirection.OWED
        assert result.can_payout is True

    def test_never_bought_in(self) -> None:
        result = calculate_early_cash_out(_player(0, buy_ins=0, cash_outs=2500), 10000)
        assert result.net_position == 2500
        assert result.direction == CashOutDirection.OWED

    def test_fractional_bank_rounded_half_up(self) -> None:
        result = calculate_early_cash_out(_player(10000, buy_ins=10000), Decimal("4000.5"))
        assert result.bank_balance_before == 4001
        [adj] = result.rounding
        assert adj.field == "bank_balance"
        assert adj.direction == RoundingDirection.UP
        assert adj.original == Decimal("4000.5")

    def test_fractional_net_rounded_once(self) -> None:
        result = calculate_early_cash_out(_player(Decimal("15000.25"), buy_ins=10000), 90000)
        assert result.net_position == 5000
        assert result.rounding[0].field == "net_position"
        assert result.rounding[0].direction == RoundingDirection.DOWN

    def test_no_rounding_for_whole_cents(self) -> None:
        result = calculate_early_cash_out(_player(15000, buy_ins=10000), 4000)
        assert result.rounding == ()

    def test_carries_identity(self) -> None:
        result = calculate_early_cash_out(_player(0), 0)
        assert result.player_id == "p1"
        assert result.player_name == "Alice"
        assert result.calculated_at.tzinfo is not None

    def test_latency_budget(self) -> None:
        start = time.perf_counter()
        result = calculate_early_cash_out(_player(15000, buy_ins=10000), 4000)
        assert time.perf_counter() - start < 1.0
        assert result.calculation_duration_ms < 1000
