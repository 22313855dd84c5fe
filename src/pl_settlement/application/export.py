"""Plain-text settlement summary for the sharing component (chat apps, SMS).

Amounts are converted from cents to display dollars here and nowhere else.
"""

from src.pl_common.cents import cents_to_display
from src.pl_common.enums import CashOutDirection
from src.pl_settlement.domain.models import (
    EarlyCashOutResult,
    OptimizedSettlement,
    PlanComparison,
    SettlementValidation,
)

MAX_LISTED_PAYMENTS = 10


def render_settlement_text(
    settlement: OptimizedSettlement,
    validation: SettlementValidation | None = None,
    max_payments: int = MAX_LISTED_PAYMENTS,
    comparison: PlanComparison | None = None,
) -> str:
    lines = [
        "POKER SETTLEMENT",
        "=" * 30,
        f"Session: {settlement.session_id or '-'}",
        f"Calculated: {settlement.calculated_at.strftime('%Y-%m-%d %H:%M UTC')}",
        "",
        f"Amount: {cents_to_display(settlement.total_amount_settled)}",
        f"Transactions: {settlement.total_transaction_count} "
        f"(instead of {settlement.direct_transaction_count})",
        f"Optimization: {settlement.reduction_percentage:.1f}% reduction",
        f"Balance: {'Balanced' if settlement.is_balanced else 'UNBALANCED'}",
        "",
        "PAYMENTS",
    ]
    if not settlement.payments:
        lines.append("Nobody owes anything.")
    for pay in settlement.payments[:max_payments]:
        lines.append(
            f"{pay.from_player_name or pay.from_player_id} -> "
            f"{pay.to_player_name or pay.to_player_id}: {cents_to_display(pay.amount)}"
        )
    hidden = len(settlement.payments) - max_payments
    if hidden > 0:
        lines.append(f"... and {hidden} more payment{'' if hidden == 1 else 's'}")

    if validation is not None:
        lines += ["", "VERIFICATION", f"Status: {'VERIFIED' if validation.is_valid else 'ISSUES FOUND'}"]
        lines += [f"- {e.message}" for e in validation.critical_errors]
        lines += [f"! {w}" for w in validation.warnings]
    if comparison is not None:
        lines += ["", *comparison.audit_trail]
    return "\n".join(lines)


def render_cash_out_text(result: EarlyCashOutResult) -> str:
    """Summary of one early cash-out, including any half-cent rounding applied."""
    if result.direction == CashOutDirection.OWED:
        verb = "receives" if result.can_payout else "is owed (bank short)"
    else:
        verb = "pays"
    lines = [
        "EARLY CASH-OUT",
        f"{result.player_name or result.player_id} {verb} {cents_to_display(result.settlement_amount)}",
        f"Bank: {cents_to_display(result.bank_balance_before)} -> "
        f"{cents_to_display(result.bank_balance_after)}",
    ]
    for adj in result.rounding:
        lines.append(
            f"Rounded {adj.field}: {adj.original} -> {adj.rounded} cents ({adj.direction.value})"
        )
    return "\n".join(lines)
