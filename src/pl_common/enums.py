"""Global enums shared by the ledger and settlement contexts."""

from enum import Enum


class TransactionType(str, Enum):
    BUY_IN = "BUY_IN"
    CASH_OUT = "CASH_OUT"


class CashOutDirection(str, Enum):
    """owed: the bank pays the player. owes: the player pays the bank."""
    OWED = "owed"
    OWES = "owes"


class RoundingDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NONE = "none"


class Severity(str, Enum):
    CRITICAL = "critical"  # blocks settlement
    WARNING = "warning"
    INFO = "info"


class ValidationCode(str, Enum):
    PLAYER_POSITION_MISMATCH = "PLAYER_POSITION_MISMATCH"
    ROUNDING_DISCREPANCY = "ROUNDING_DISCREPANCY"
    UNBALANCED_SETTLEMENT = "UNBALANCED_SETTLEMENT"
    UNBALANCED_POSITIONS = "UNBALANCED_POSITIONS"
    NON_POSITIVE_AMOUNT = "NON_POSITIVE_AMOUNT"
    FRACTIONAL_CENT = "FRACTIONAL_CENT"
    AMOUNT_OUT_OF_RANGE = "AMOUNT_OUT_OF_RANGE"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    SELF_PAYMENT = "SELF_PAYMENT"
    EXCESS_TRANSACTIONS = "EXCESS_TRANSACTIONS"
