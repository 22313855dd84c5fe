"""SettlementService: the engine's public entry points with caching and latency logging.

Holds no session state. The only thing it owns is a reference to the
caller's ResultCache (optional); each call receives a fresh snapshot and
returns a fresh result, so one instance can serve many threads.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from config.settings import Settings, settings as default_settings
from src.pl_common.datetime_utils import elapsed_ms, monotonic_ms
from src.pl_ledger.domain.aggregator import aggregate, calculate_bank_balance
from src.pl_ledger.domain.models import BankBalance, PlayerPosition, TransactionRecord
from src.pl_settlement.domain.early_cashout import calculate_early_cash_out
from src.pl_settlement.domain.models import (
    EarlyCashOutResult,
    OptimizedSettlement,
    PaymentPlan,
    PlanComparison,
    SettlementValidation,
)
from src.pl_settlement.domain.optimizer import compare_with_direct_plan, optimize_settlement
from src.pl_settlement.domain.validator import validate_settlement
from src.pl_settlement.infrastructure.result_cache import ResultCache, make_cache_key

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        cache: ResultCache | None = None,
        config: Settings | None = None,
    ) -> None:
        self._cache = cache
        self._config = config or default_settings

    @property
    def tolerance(self) -> int:
        return self._config.SETTLEMENT_TOLERANCE_CENTS

    def aggregate(
        self,
        transactions: Iterable[TransactionRecord],
        chip_counts: Mapping[str, int],
        player_names: Mapping[str, str] | None = None,
    ) -> list[PlayerPosition]:
        return aggregate(transactions, chip_counts, player_names)

    def calculate_bank_balance(self, positions: Sequence[PlayerPosition]) -> BankBalance:
        return calculate_bank_balance(positions, tolerance=self._config.BANK_TOLERANCE_CENTS)

    def calculate_early_cash_out(
        self,
        position: PlayerPosition,
        bank_balance: int | Decimal,
        session_id: str = "",
    ) -> EarlyCashOutResult:
        start = monotonic_ms()
        if self._cache is None:
            result = calculate_early_cash_out(position, bank_balance)
        else:
            key = make_cache_key("cashout", session_id, [position], bank_balance)
            result = self._cache.get_or_compute(
                key, lambda: calculate_early_cash_out(position, bank_balance)
            )
        self._log_latency(
            "early cash-out", session_id, elapsed_ms(start), self._config.EARLY_CASHOUT_BUDGET_MS
        )
        return result

    def optimize_settlement(
        self, positions: Sequence[PlayerPosition], session_id: str = ""
    ) -> OptimizedSettlement:
        start = monotonic_ms()
        if self._cache is None:
            result = optimize_settlement(positions, session_id, self.tolerance)
        else:
            key = make_cache_key("optimize", session_id, positions, self.tolerance)
            result = self._cache.get_or_compute(
                key, lambda: optimize_settlement(positions, session_id, self.tolerance)
            )
        self._log_latency(
            "optimization", session_id, elapsed_ms(start), self._config.OPTIMIZE_BUDGET_MS
        )
        return result

    def validate_settlement(
        self,
        settlement: OptimizedSettlement | Sequence[PaymentPlan],
        positions: Sequence[PlayerPosition],
    ) -> SettlementValidation:
        return validate_settlement(settlement, positions, self.tolerance)

    def compare_with_direct_plan(
        self, settlement: OptimizedSettlement, positions: Sequence[PlayerPosition]
    ) -> PlanComparison:
        return compare_with_direct_plan(settlement, positions, self.tolerance)

    def _log_latency(
        self, operation: str, session_id: str, duration_ms: float, budget_ms: float
    ) -> None:
        if duration_ms > budget_ms:
            logger.warning(
                "Settlement %s for session %s took %.1fms (budget %.0fms)",
                operation,
                session_id or "-",
                duration_ms,
                budget_ms,
            )
        else:
            logger.debug("Settlement %s took %.1fms", operation, duration_ms)
