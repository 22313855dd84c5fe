"""Early cash-out: what a departing player receives or pays right now."""

import logging
from decimal import Decimal

from src.pl_common.cents import round_half_up
from src.pl_common.datetime_utils import elapsed_ms, monotonic_ms, utc_now
from src.pl_common.enums import CashOutDirection, RoundingDirection
from src.pl_ledger.domain.models import PlayerPosition
from src.pl_settlement.domain.models import EarlyCashOutResult, RoundingAdjustment

logger = logging.getLogger(__name__)


def _whole_cents(
    value: int | Decimal, name: str, notes: list[RoundingAdjustment]
) -> int:
    rounded, direction = round_half_up(value)
    if direction != RoundingDirection.NONE:
        notes.append(
            RoundingAdjustment(
                field=name, original=Decimal(value), rounded=rounded, direction=direction
            )
        )
    return rounded


def calculate_early_cash_out(
    position: PlayerPosition, bank_balance: int | Decimal
) -> EarlyCashOutResult:
    """Settle one player against the bank.

    settlement_amount = |net_position|; direction is owed when the player is
    up (or even) and owes when down. A winner can only be paid if the bank
    holds at least the settlement amount; a shortfall is reported through
    can_payout=False rather than raised, and the bank balance is then left
    unchanged. Fractional-cent inputs are rounded half-up and recorded.
    """
    start = monotonic_ms()
    notes: list[RoundingAdjustment] = []

    # round the net once, not each component
    net = _whole_cents(position.net_position, "net_position", notes)
    bank_before = _whole_cents(bank_balance, "bank_balance", notes)

    amount = abs(net)
    direction = CashOutDirection.OWED if net >= 0 else CashOutDirection.OWES

    if direction == CashOutDirection.OWES:
        can_payout = True
        bank_after = bank_before + amount
    else:
        can_payout = bank_before >= amount
        bank_after = bank_before - amount if can_payout else bank_before

    if not can_payout:
        logger.warning(
            "Bank cannot cover cash-out: player=%s owed=%d bank=%d",
            position.player_id,
            amount,
            bank_before,
        )

    duration = elapsed_ms(start)
    return EarlyCashOutResult(
        player_id=position.player_id,
        player_name=position.player_name,
        net_position=net,
        settlement_amount=amount,
        direction=direction,
        can_payout=can_payout,
        bank_balance_before=bank_before,
        bank_balance_after=bank_after,
        calculated_at=utc_now(),
        rounding=tuple(notes),
        calculation_duration_ms=duration,
    )
