"""Greedy debt reduction: largest debtor pays largest creditor until all are settled.

Not globally minimal in pathological cases, but never needs more than n - 1
payments for n non-zero parties. Ties are broken by player_id ascending so
the same input always yields the same plan.
"""

import heapq
import logging
from collections.abc import Sequence

from src.pl_common.cents import DEFAULT_TOLERANCE_CENTS, check_representable, percentage
from src.pl_common.datetime_utils import elapsed_ms, monotonic_ms, utc_now
from src.pl_common.errors import UnbalancedInputError
from src.pl_common.id_generator import new_calculation_id
from src.pl_ledger.domain.models import PlayerPosition
from src.pl_settlement.domain.models import OptimizedSettlement, PaymentPlan, PlanComparison
from src.pl_settlement.domain.validator import validate_settlement

logger = logging.getLogger(__name__)


def check_zero_sum(positions: Sequence[PlayerPosition], tolerance: int) -> int:
    """Return the sum of net positions; raise UnbalancedInputError beyond tolerance.

    Every position and every partial sum must fit the 64-bit minor-unit range,
    otherwise PrecisionOverflowError is raised before any payment is planned.
    """
    total = 0
    for p in positions:
        check_representable(p.net_position, f"net position of {p.player_id}")
        total = check_representable(total + p.net_position, "sum of net positions")
    if abs(total) > tolerance:
        logger.error(
            "Refusing to settle: net positions sum to %d cents (tolerance ±%d)",
            total,
            tolerance,
        )
        raise UnbalancedInputError(total, tolerance)
    return total


def direct_transaction_count(positions: Sequence[PlayerPosition]) -> int:
    """Naive baseline: every non-zero party settles individually with the organizer."""
    return sum(1 for p in positions if p.net_position != 0)


def build_greedy_payments(positions: Sequence[PlayerPosition]) -> list[PaymentPlan]:
    """Match largest debtor with largest creditor; heaps keyed (-magnitude, player_id)."""
    names = {p.player_id: p.player_name for p in positions}
    creditors: list[tuple[int, str]] = []
    debtors: list[tuple[int, str]] = []
    for p in positions:
        net = p.net_position
        if net > 0:
            creditors.append((-net, p.player_id))
        elif net < 0:
            debtors.append((net, p.player_id))  # net is already negative
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    payments: list[PaymentPlan] = []
    while creditors and debtors:
        neg_credit, creditor_id = heapq.heappop(creditors)
        neg_debt, debtor_id = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt

        amount = min(credit, debt)
        check_representable(amount, f"payment {debtor_id} -> {creditor_id}")
        payments.append(
            PaymentPlan(
                from_player_id=debtor_id,
                to_player_id=creditor_id,
                amount=amount,
                from_player_name=names[debtor_id],
                to_player_name=names[creditor_id],
            )
        )
        logger.debug("%s -> %s: %d", debtor_id, creditor_id, amount)

        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), creditor_id))
        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debtor_id))

    residual = sum(-c for c, _ in creditors) - sum(-d for d, _ in debtors)
    if residual:
        # only reachable when the input carried an imbalance within tolerance
        logger.warning("Dropped residual of %d cents left by rounding", residual)
    return payments


def _settles_every_party(
    positions: Sequence[PlayerPosition], payments: Sequence[PaymentPlan], tolerance: int
) -> bool:
    flow = {p.player_id: 0 for p in positions}
    for pay in payments:
        flow[pay.from_player_id] -= pay.amount
        flow[pay.to_player_id] += pay.amount
    return all(abs(flow[p.player_id] - p.net_position) <= tolerance for p in positions)


def optimize_settlement(
    positions: Sequence[PlayerPosition],
    session_id: str = "",
    tolerance: int = DEFAULT_TOLERANCE_CENTS,
) -> OptimizedSettlement:
    """Produce the payment plan that zeroes every net position.

    Raises UnbalancedInputError when the positions do not sum to zero within
    tolerance; that signals an upstream ledger bug and is not retried.
    """
    start = monotonic_ms()
    check_zero_sum(positions, tolerance)

    payments = build_greedy_payments(positions)
    direct = direct_transaction_count(positions)
    is_balanced = _settles_every_party(positions, payments, tolerance)

    duration = elapsed_ms(start)
    settlement = OptimizedSettlement(
        session_id=session_id,
        payments=tuple(payments),
        direct_transaction_count=direct,
        reduction_percentage=percentage(direct - len(payments), direct),
        is_balanced=is_balanced,
        calculated_at=utc_now(),
        calculation_id=new_calculation_id(),
        calculation_duration_ms=duration,
    )
    logger.info(
        "Settlement %s: %d payments (direct %d, -%.2f%%) in %.1fms",
        session_id or "-",
        len(payments),
        direct,
        settlement.reduction_percentage,
        duration,
    )
    return settlement


def build_direct_settlement(positions: Sequence[PlayerPosition]) -> list[PaymentPlan]:
    """Hub plan used for comparison: debtors pay the largest creditor, who pays the rest.

    The hub is the largest creditor, ties by player_id. Requires balanced
    input to leave the hub at its own net position.
    """
    creditors = sorted(
        (p for p in positions if p.net_position > 0),
        key=lambda p: (-p.net_position, p.player_id),
    )
    debtors = sorted(
        (p for p in positions if p.net_position < 0),
        key=lambda p: (p.net_position, p.player_id),
    )
    if not creditors or not debtors:
        return []
    hub = creditors[0]
    plan = [
        PaymentPlan(
            from_player_id=d.player_id,
            to_player_id=hub.player_id,
            amount=-d.net_position,
            from_player_name=d.player_name,
            to_player_name=hub.player_name,
        )
        for d in debtors
    ]
    plan.extend(
        PaymentPlan(
            from_player_id=hub.player_id,
            to_player_id=c.player_id,
            amount=c.net_position,
            from_player_name=hub.player_name,
            to_player_name=c.player_name,
        )
        for c in creditors[1:]
    )
    return plan


def compare_with_direct_plan(
    settlement: OptimizedSettlement,
    positions: Sequence[PlayerPosition],
    tolerance: int = DEFAULT_TOLERANCE_CENTS,
) -> PlanComparison:
    """Cross-check an optimized plan against the hub plan for the same positions.

    The hub plan is validated independently; the optimized plan should never
    need more payments than it does.
    """
    alternative = build_direct_settlement(positions)
    check = validate_settlement(alternative, positions, tolerance)
    optimized = settlement.total_transaction_count
    trail = (
        f"Cross-check: hub plan settles with {len(alternative)} payment"
        f"{'' if len(alternative) == 1 else 's'} "
        f"({'VALID' if check.is_valid else 'INVALID'})",
        f"Cross-check: optimized plan uses {optimized}, "
        f"saving {len(alternative) - optimized} "
        f"{'✓' if optimized <= len(alternative) else '✗'}",
    )
    comparison = PlanComparison(
        optimized_count=optimized,
        alternative_count=len(alternative),
        alternative_is_valid=check.is_valid,
        audit_trail=trail,
    )
    if not comparison.optimized_not_worse:
        logger.warning(
            "Settlement %s: optimized plan uses %d payments, hub plan %d",
            settlement.session_id or "-",
            optimized,
            len(alternative),
        )
    return comparison
