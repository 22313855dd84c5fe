"""Domain models for pl_settlement: immutable result objects, all amounts in cents."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.pl_common.enums import CashOutDirection, RoundingDirection, Severity


@dataclass(frozen=True)
class PaymentPlan:
    """One instructed transfer between two players."""

    from_player_id: str
    to_player_id: str
    amount: int                      # cents, > 0
    from_player_name: str = ""
    to_player_name: str = ""


@dataclass(frozen=True)
class OptimizedSettlement:
    session_id: str
    payments: tuple[PaymentPlan, ...]
    direct_transaction_count: int    # naive baseline: every party settles alone
    reduction_percentage: float
    is_balanced: bool
    calculated_at: datetime
    calculation_id: str = ""
    calculation_duration_ms: float = 0.0

    @property
    def total_transaction_count(self) -> int:
        return len(self.payments)

    @property
    def total_amount_settled(self) -> int:
        return sum(p.amount for p in self.payments)


@dataclass(frozen=True)
class RoundingAdjustment:
    field: str
    original: Decimal                # fractional cents as supplied
    rounded: int
    direction: RoundingDirection


@dataclass(frozen=True)
class EarlyCashOutResult:
    player_id: str
    player_name: str
    net_position: int
    settlement_amount: int
    direction: CashOutDirection
    can_payout: bool
    bank_balance_before: int
    bank_balance_after: int
    calculated_at: datetime
    rounding: tuple[RoundingAdjustment, ...] = ()
    calculation_duration_ms: float = 0.0


@dataclass(frozen=True)
class SettlementError:
    code: str                        # ValidationCode value
    message: str
    severity: Severity
    affected_players: tuple[str, ...] = ()


@dataclass
class SettlementValidation:
    is_valid: bool
    errors: list[SettlementError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    audit_trail: list[str] = field(default_factory=list)

    @property
    def critical_errors(self) -> list[SettlementError]:
        return [e for e in self.errors if e.severity == Severity.CRITICAL]


@dataclass(frozen=True)
class PlanComparison:
    """Greedy plan cross-checked against the hub plan for the same positions."""

    optimized_count: int
    alternative_count: int
    alternative_is_valid: bool
    audit_trail: tuple[str, ...] = ()

    @property
    def payments_saved(self) -> int:
        return self.alternative_count - self.optimized_count

    @property
    def optimized_not_worse(self) -> bool:
        return self.optimized_count <= self.alternative_count
