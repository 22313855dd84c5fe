# src/pl_settlement/application/schemas.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from src.pl_settlement.domain.models import (
    EarlyCashOutResult,
    OptimizedSettlement,
    PlanComparison,
    SettlementValidation,
)


class PaymentResponse(BaseModel):
    from_player_id: str
    from_player_name: str
    to_player_id: str
    to_player_name: str
    amount_cents: int


class OptimizedSettlementResponse(BaseModel):
    session_id: str
    calculation_id: str
    payments: list[PaymentResponse]
    total_transaction_count: int
    direct_transaction_count: int
    reduction_percentage: float
    total_amount_settled_cents: int
    is_balanced: bool
    calculated_at: datetime

    @classmethod
    def from_domain(cls, s: OptimizedSettlement) -> "OptimizedSettlementResponse":
        return cls(
            session_id=s.session_id,
            calculation_id=s.calculation_id,
            payments=[
                PaymentResponse(
                    from_player_id=p.from_player_id,
                    from_player_name=p.from_player_name,
                    to_player_id=p.to_player_id,
                    to_player_name=p.to_player_name,
                    amount_cents=p.amount,
                )
                for p in s.payments
            ],
            total_transaction_count=s.total_transaction_count,
            direct_transaction_count=s.direct_transaction_count,
            reduction_percentage=s.reduction_percentage,
            total_amount_settled_cents=s.total_amount_settled,
            is_balanced=s.is_balanced,
            calculated_at=s.calculated_at,
        )


class RoundingResponse(BaseModel):
    field: str
    original: str
    rounded_cents: int
    direction: Literal["up", "down", "none"]


class EarlyCashOutResponse(BaseModel):
    player_id: str
    player_name: str
    net_position_cents: int
    settlement_amount_cents: int
    direction: Literal["owed", "owes"]
    can_payout: bool
    bank_balance_before_cents: int
    bank_balance_after_cents: int
    rounding: list[RoundingResponse]
    calculated_at: datetime

    @classmethod
    def from_domain(cls, r: EarlyCashOutResult) -> "EarlyCashOutResponse":
        return cls(
            player_id=r.player_id,
            player_name=r.player_name,
            net_position_cents=r.net_position,
            settlement_amount_cents=r.settlement_amount,
            direction=r.direction.value,
            can_payout=r.can_payout,
            bank_balance_before_cents=r.bank_balance_before,
            bank_balance_after_cents=r.bank_balance_after,
            rounding=[
                RoundingResponse(
                    field=adj.field,
                    original=str(adj.original),
                    rounded_cents=adj.rounded,
                    direction=adj.direction.value,
                )
                for adj in r.rounding
            ],
            calculated_at=r.calculated_at,
        )


class SettlementErrorResponse(BaseModel):
    code: str
    message: str
    severity: Literal["critical", "warning", "info"]
    affected_players: list[str]


class SettlementValidationResponse(BaseModel):
    is_valid: bool
    errors: list[SettlementErrorResponse]
    warnings: list[str]
    audit_trail: list[str]

    @classmethod
    def from_domain(cls, v: SettlementValidation) -> "SettlementValidationResponse":
        return cls(
            is_valid=v.is_valid,
            errors=[
                SettlementErrorResponse(
                    code=e.code,
                    message=e.message,
                    severity=e.severity.value,
                    affected_players=list(e.affected_players),
                )
                for e in v.errors
            ],
            warnings=list(v.warnings),
            audit_trail=list(v.audit_trail),
        )


class PlanComparisonResponse(BaseModel):
    optimized_count: int
    alternative_count: int
    payments_saved: int
    alternative_is_valid: bool
    audit_trail: list[str]

    @classmethod
    def from_domain(cls, c: PlanComparison) -> "PlanComparisonResponse":
        return cls(
            optimized_count=c.optimized_count,
            alternative_count=c.alternative_count,
            payments_saved=c.payments_saved,
            alternative_is_valid=c.alternative_is_valid,
            audit_trail=list(c.audit_trail),
        )
