"""Tests for pl_settlement.application.service: the engine's entry points."""

import logging
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from config.settings import Settings
from src.pl_common.cents import DEFAULT_TOLERANCE_CENTS
from src.pl_common.errors import UnbalancedInputError
from src.pl_ledger.domain.models import TransactionRecord
from src.pl_settlement.application.service import SettlementService
from src.pl_settlement.infrastructure.result_cache import ResultCache


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestEndToEnd:
    def test_ledger_to_validated_plan(self) -> None:
        svc = SettlementService(config=_settings())
        txs = [
            TransactionRecord(id="1", player_id="a", type="BUY_IN", amount=10000),
            TransactionRecord(id="2", player_id="b", type="BUY_IN", amount=10000),
            TransactionRecord(id="3", player_id="c", type="BUY_IN", amount=10000),
            TransactionRecord(id="4", player_id="c", type="BUY_IN", amount=5000, is_voided=True),
        ]
        positions = svc.aggregate(txs, {"a": 5000, "b": 13000, "c": 12000},
                                  {"a": "Alice", "b": "Bob", "c": "Cara"})
        settlement = svc.optimize_settlement(positions, session_id="s1")
        assert [(p.from_player_name, p.to_player_name, p.amount) for p in settlement.payments] == [
            ("Alice", "Bob", 3000),
            ("Alice", "Cara", 2000),
        ]
        assert svc.validate_settlement(settlement, positions).is_valid

    def test_bank_balance_uses_configured_tolerance(self, make_position) -> None:
        svc = SettlementService(config=_settings(BANK_TOLERANCE_CENTS=5))
        bank = svc.calculate_bank_balance([make_position("a", 3)])
        assert bank.discrepancy == 3
        assert bank.is_balanced

    def test_unbalanced_input_propagates(self, make_position) -> None:
        svc = SettlementService(cache=ResultCache(), config=_settings())
        with pytest.raises(UnbalancedInputError):
            svc.optimize_settlement([make_position("a", -100), make_position("b", 237)])

    def test_tolerance_from_settings(self, make_position) -> None:
        positions = [make_position("a", -100), make_position("b", 101)]
        with pytest.raises(UnbalancedInputError):
            SettlementService(config=_settings(SETTLEMENT_TOLERANCE_CENTS=0)).optimize_settlement(positions)
        assert SettlementService(config=_settings()).optimize_settlement(positions).is_balanced

    def test_default_tolerance_shared_with_domain(self) -> None:
        assert _settings().SETTLEMENT_TOLERANCE_CENTS == DEFAULT_TOLERANCE_CENTS

    def test_plan_cross_checked_against_hub(self, make_position) -> None:
        svc = SettlementService(config=_settings())
        positions = [
            make_position("a", -3000),
            make_position("b", -2000),
            make_position("c", 4000),
            make_position("d", 1000),
        ]
        comparison = svc.compare_with_direct_plan(svc.optimize_settlement(positions), positions)
        assert comparison.alternative_count == 3
        assert comparison.alternative_is_valid
        assert comparison.optimized_not_worse


class TestCaching:
    def test_optimization_cached_per_session(self, three_players) -> None:
        cache = ResultCache()
        svc = SettlementService(cache=cache, config=_settings())
        first = svc.optimize_settlement(three_players, session_id="s1")
        second = svc.optimize_settlement(list(reversed(three_players)), session_id="s1")
        assert second is first
        assert cache.stats.hits == 1
        other = svc.optimize_settlement(three_players, session_id="s2")
        assert other is not first

    def test_cash_out_cached_on_bank_balance(self, make_position) -> None:
        cache = ResultCache()
        svc = SettlementService(cache=cache, config=_settings())
        winner = make_position("a", 5000)
        r1 = svc.calculate_early_cash_out(winner, 4000, session_id="s1")
        r2 = svc.calculate_early_cash_out(winner, 4000, session_id="s1")
        r3 = svc.calculate_early_cash_out(winner, 9000, session_id="s1")
        assert r1 is r2
        assert r1.can_payout is False
        assert r3.can_payout is True

    def test_no_cache_recomputes(self, three_players) -> None:
        svc = SettlementService(config=_settings())
        first = svc.optimize_settlement(three_players)
        second = svc.optimize_settlement(three_players)
        assert first is not second
        assert first.payments == second.payments

    def test_parallel_sessions(self, make_position) -> None:
        svc = SettlementService(cache=ResultCache(), config=_settings())

        def run(n: int):
            positions = [make_position("a", -n), make_position("b", n)]
            return svc.optimize_settlement(positions, session_id=f"s{n}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(1, 65)))
        assert [r.payments[0].amount for r in results] == list(range(1, 65))


class TestLatencyLogging:
    def test_budget_overrun_logged(self, three_players, caplog) -> None:
        svc = SettlementService(config=_settings(OPTIMIZE_BUDGET_MS=5.0))
        with patch("src.pl_settlement.application.service.elapsed_ms", lambda start: 50.0):
            with caplog.at_level(logging.WARNING, logger="src.pl_settlement.application.service"):
                svc.optimize_settlement(three_players, session_id="slow")
        assert any("budget" in rec.getMessage() for rec in caplog.records)
