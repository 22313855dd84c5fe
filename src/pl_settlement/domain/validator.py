"""Settlement plan validation with a human-readable audit trail.

Checks, in order:
  1. per-player balance: inbound - outbound == net_position
  2. global balance: debits == credits, net positions sum to zero
  3. every amount is a positive, finite, whole number of cents
  4. every payment references known players and is not a self-payment
  5. transaction count is within the n - 1 bound (info only)

A validation failure is data, never an exception: the caller decides what to
show. Only CRITICAL errors make the plan invalid. Positions that cannot be
represented in minor units are an input error and raise.
"""

import logging
import math
from collections.abc import Sequence
from decimal import Decimal

from src.pl_common.cents import (
    DEFAULT_TOLERANCE_CENTS,
    MAX_MINOR_UNITS,
    check_representable,
    signed_display,
)
from src.pl_common.enums import Severity, ValidationCode
from src.pl_ledger.domain.models import PlayerPosition
from src.pl_settlement.domain.models import (
    OptimizedSettlement,
    PaymentPlan,
    SettlementError,
    SettlementValidation,
)

logger = logging.getLogger(__name__)

_OK = "✓"
_FAIL = "✗"
_WARN = "⚠"


def _is_whole_positive(amount: object) -> bool:
    if isinstance(amount, bool):
        return False
    if isinstance(amount, int):
        return amount > 0
    if isinstance(amount, float):
        return math.isfinite(amount) and amount.is_integer() and amount > 0
    if isinstance(amount, Decimal):
        return amount.is_finite() and amount == amount.to_integral_value() and amount > 0
    return False


def _as_cents(amount: object) -> int:
    """Best-effort integer view of an amount for the balance arithmetic."""
    if isinstance(amount, int) and not isinstance(amount, bool):
        return amount
    if isinstance(amount, (float, Decimal)):
        if isinstance(amount, float) and not math.isfinite(amount):
            return 0
        if isinstance(amount, Decimal) and not amount.is_finite():
            return 0
        return int(amount)
    return 0


def _check_amounts(
    payments: Sequence[PaymentPlan],
    errors: list[SettlementError],
    trail: list[str],
) -> None:
    bad = 0
    for idx, pay in enumerate(payments, start=1):
        if _is_whole_positive(pay.amount):
            if _as_cents(pay.amount) <= MAX_MINOR_UNITS:
                continue
            code = ValidationCode.AMOUNT_OUT_OF_RANGE
        elif (
            isinstance(pay.amount, (float, Decimal))
            and _as_cents(pay.amount) > 0
            and pay.amount != _as_cents(pay.amount)
        ):
            code = ValidationCode.FRACTIONAL_CENT
        else:
            code = ValidationCode.NON_POSITIVE_AMOUNT
        bad += 1
        errors.append(
            SettlementError(
                code=code.value,
                message=(
                    f"Payment #{idx} {pay.from_player_id} -> {pay.to_player_id} "
                    f"has invalid amount {pay.amount!r}"
                ),
                severity=Severity.CRITICAL,
                affected_players=(pay.from_player_id, pay.to_player_id),
            )
        )
    trail.append(
        f"Amounts: {len(payments) - bad}/{len(payments)} payments are positive whole cents "
        f"{_OK if bad == 0 else _FAIL}"
    )


def _check_references(
    payments: Sequence[PaymentPlan],
    known: set[str],
    errors: list[SettlementError],
    trail: list[str],
) -> None:
    bad = 0
    for idx, pay in enumerate(payments, start=1):
        unknown = [pid for pid in (pay.from_player_id, pay.to_player_id) if pid not in known]
        if unknown:
            bad += 1
            errors.append(
                SettlementError(
                    code=ValidationCode.UNKNOWN_PLAYER.value,
                    message=f"Payment #{idx} references unknown player(s): {', '.join(unknown)}",
                    severity=Severity.CRITICAL,
                    affected_players=tuple(unknown),
                )
            )
        elif pay.from_player_id == pay.to_player_id:
            bad += 1
            errors.append(
                SettlementError(
                    code=ValidationCode.SELF_PAYMENT.value,
                    message=f"Payment #{idx} pays {pay.from_player_id} to themselves",
                    severity=Severity.CRITICAL,
                    affected_players=(pay.from_player_id,),
                )
            )
    trail.append(
        f"References: {len(payments) - bad}/{len(payments)} payments name two distinct "
        f"known players {_OK if bad == 0 else _FAIL}"
    )


def _check_player_balances(
    payments: Sequence[PaymentPlan],
    positions: Sequence[PlayerPosition],
    tolerance: int,
    errors: list[SettlementError],
    warnings: list[str],
    trail: list[str],
) -> None:
    inbound: dict[str, int] = {}
    outbound: dict[str, int] = {}
    counts: dict[str, int] = {}
    for pay in payments:
        cents = _as_cents(pay.amount)
        inbound[pay.to_player_id] = inbound.get(pay.to_player_id, 0) + cents
        outbound[pay.from_player_id] = outbound.get(pay.from_player_id, 0) + cents
        counts[pay.to_player_id] = counts.get(pay.to_player_id, 0) + 1
        counts[pay.from_player_id] = counts.get(pay.from_player_id, 0) + 1

    for p in positions:
        expected = p.net_position
        computed = inbound.get(p.player_id, 0) - outbound.get(p.player_id, 0)
        diff = computed - expected
        n = counts.get(p.player_id, 0)
        line = (
            f"Player {p.player_name}: expected {signed_display(expected)}, "
            f"computed from {n} payment{'' if n == 1 else 's'} = {signed_display(computed)}"
        )
        if diff == 0:
            trail.append(f"{line} {_OK}")
        elif abs(diff) <= tolerance:
            trail.append(f"{line} {_WARN} (off by {diff:+d} cents)")
            msg = (
                f"{p.player_name} settles {diff:+d} cents from their net position "
                f"(within ±{tolerance} cent rounding tolerance)"
            )
            warnings.append(msg)
            errors.append(
                SettlementError(
                    code=ValidationCode.ROUNDING_DISCREPANCY.value,
                    message=msg,
                    severity=Severity.WARNING,
                    affected_players=(p.player_id,),
                )
            )
        else:
            trail.append(f"{line} {_FAIL}")
            errors.append(
                SettlementError(
                    code=ValidationCode.PLAYER_POSITION_MISMATCH.value,
                    message=(
                        f"{p.player_name} settlement discrepancy: expected {expected}, "
                        f"computed {computed}, difference {diff:+d} cents"
                    ),
                    severity=Severity.CRITICAL,
                    affected_players=(p.player_id,),
                )
            )


def _check_global_balance(
    payments: Sequence[PaymentPlan],
    positions: Sequence[PlayerPosition],
    tolerance: int,
    errors: list[SettlementError],
    trail: list[str],
) -> None:
    # money leaving the table's players must all land on the table's players
    known = {p.player_id for p in positions}
    debits = sum(_as_cents(p.amount) for p in payments if p.from_player_id in known)
    credits = sum(_as_cents(p.amount) for p in payments if p.to_player_id in known)
    balanced = debits == credits
    trail.append(
        f"Global: total debits {debits} cents, total credits {credits} cents, "
        f"net {credits - debits} {_OK if balanced else _FAIL}"
    )
    if not balanced:
        errors.append(
            SettlementError(
                code=ValidationCode.UNBALANCED_SETTLEMENT.value,
                message=f"Debits {debits} != credits {credits}",
                severity=Severity.CRITICAL,
            )
        )

    net_sum = sum(p.net_position for p in positions)
    within = abs(net_sum) <= tolerance
    trail.append(
        f"Global: net positions sum to {net_sum} cents (tolerance ±{tolerance}) "
        f"{_OK if within else _FAIL}"
    )
    if not within:
        errors.append(
            SettlementError(
                code=ValidationCode.UNBALANCED_POSITIONS.value,
                message=f"Net positions sum to {net_sum} cents, expected 0 ±{tolerance}",
                severity=Severity.CRITICAL,
            )
        )


def _check_transaction_bound(
    payments: Sequence[PaymentPlan],
    positions: Sequence[PlayerPosition],
    errors: list[SettlementError],
    trail: list[str],
) -> None:
    parties = sum(1 for p in positions if p.net_position != 0)
    bound = max(parties - 1, 0)
    within = len(payments) <= bound
    trail.append(
        f"Bound: {len(payments)} payments for {parties} non-zero players "
        f"(at most {bound}) {_OK if within else _WARN}"
    )
    if not within:
        errors.append(
            SettlementError(
                code=ValidationCode.EXCESS_TRANSACTIONS.value,
                message=f"{len(payments)} payments exceed the {bound}-payment greedy bound",
                severity=Severity.INFO,
            )
        )


def validate_settlement(
    settlement: OptimizedSettlement | Sequence[PaymentPlan],
    positions: Sequence[PlayerPosition],
    tolerance: int = DEFAULT_TOLERANCE_CENTS,
) -> SettlementValidation:
    """Validate any payment plan against the players' net positions.

    Positions outside the 64-bit minor-unit range raise PrecisionOverflowError;
    an out-of-range payment amount is reported as a critical error.
    """
    running = 0
    for p in positions:
        check_representable(p.net_position, f"net position of {p.player_id}")
        running = check_representable(running + p.net_position, "sum of net positions")

    if isinstance(settlement, OptimizedSettlement):
        payments: Sequence[PaymentPlan] = settlement.payments
        label = settlement.session_id or settlement.calculation_id or "-"
    else:
        payments = list(settlement)
        label = "-"

    errors: list[SettlementError] = []
    warnings: list[str] = []
    trail: list[str] = [
        f"Validating {len(payments)} payments for {len(positions)} players "
        f"(session {label}, tolerance ±{tolerance} cents)"
    ]

    _check_player_balances(payments, positions, tolerance, errors, warnings, trail)
    _check_global_balance(payments, positions, tolerance, errors, trail)
    _check_amounts(payments, errors, trail)
    _check_references(payments, {p.player_id for p in positions}, errors, trail)
    _check_transaction_bound(payments, positions, errors, trail)

    is_valid = not any(e.severity == Severity.CRITICAL for e in errors)
    trail.append(
        f"Result: {'VALID' if is_valid else 'INVALID'} "
        f"({sum(1 for e in errors if e.severity == Severity.CRITICAL)} critical, "
        f"{len(warnings)} warnings)"
    )
    if not is_valid:
        logger.warning("Settlement %s failed validation: %s", label, [e.code for e in errors])
    return SettlementValidation(
        is_valid=is_valid, errors=errors, warnings=warnings, audit_trail=trail
    )
