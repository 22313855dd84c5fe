"""Integer arithmetic utilities for the cents-based settlement engine.

All buy-ins, cash-outs, chip values and payments use int (cents). Decimal is
accepted only at the edges and rounded half-up to a whole cent before any
arithmetic happens. No float.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.pl_common.enums import RoundingDirection
from src.pl_common.errors import InvalidLedgerStateError, PrecisionOverflowError

# Signed 64-bit range, same as the ledger store's BIGINT amount columns.
MAX_MINOR_UNITS: int = 2**63 - 1

# Default settlement tolerance: absorbs a single upstream half-cent rounding.
DEFAULT_TOLERANCE_CENTS: int = 1


def check_representable(cents: int, what: str = "amount") -> int:
    """Raise PrecisionOverflowError if cents falls outside the signed 64-bit range."""
    if not (-MAX_MINOR_UNITS <= cents <= MAX_MINOR_UNITS):
        raise PrecisionOverflowError(what, cents)
    return cents


def require_minor_units(value: object, what: str = "amount") -> int:
    """Validate a ledger-supplied amount: a non-negative whole number of cents.

    bool is rejected even though it subclasses int. A float is accepted only
    when it is finite and integral (e.g. 500.0 from a JSON decoder).
    """
    if isinstance(value, bool):
        raise InvalidLedgerStateError(f"{what} must be an integer number of cents, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidLedgerStateError(f"{what} is not finite: {value!r}")
        if not value.is_integer():
            raise InvalidLedgerStateError(f"{what} has fractional cents: {value!r}")
        value = int(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidLedgerStateError(f"{what} is not finite: {value!r}")
        if value != value.to_integral_value():
            raise InvalidLedgerStateError(f"{what} has fractional cents: {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        raise InvalidLedgerStateError(f"{what} must be an integer number of cents, got {value!r}")
    if value < 0:
        raise InvalidLedgerStateError(f"{what} must not be negative, got {value}")
    return check_representable(value, what)


def round_half_up(value: int | Decimal) -> tuple[int, RoundingDirection]:
    """Round a (possibly fractional) cent amount to a whole cent, half away from zero.

    Returns the rounded value and which way it moved: 12.5 -> (13, UP),
    -12.5 -> (-13, DOWN), 12.4 -> (12, DOWN), 12 -> (12, NONE).
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return check_representable(value), RoundingDirection.NONE
    try:
        dec = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidLedgerStateError(f"Not a monetary amount: {value!r}") from exc
    if not dec.is_finite():
        raise InvalidLedgerStateError(f"Monetary amount is not finite: {value!r}")
    rounded = int(dec.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    check_representable(rounded)
    if rounded > dec:
        return rounded, RoundingDirection.UP
    if rounded < dec:
        return rounded, RoundingDirection.DOWN
    return rounded, RoundingDirection.NONE


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def signed_display(cents: int) -> str:
    """Like cents_to_display but always carries a sign: 5000 -> '+$50.00'."""
    if cents < 0:
        return cents_to_display(cents)
    return "+" + cents_to_display(cents)


def percentage(part: int, whole: int) -> float:
    """part / whole * 100 rounded to two decimals; 0.0 when whole is 0."""
    if whole == 0:
        return 0.0
    scaled = Decimal(part * 100) / Decimal(whole)
    return float(scaled.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
