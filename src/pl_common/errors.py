"""Unified error codes and custom exceptions.

Only unexpected, non-recoverable conditions are raised. Expected outcomes
(an unbalanced plan, a bank that cannot cover a payout) are returned as data
by the validator and the early cash-out calculator.

Error code ranges:
  1xxx: Ledger input
  2xxx: Settlement
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


# --- 1xxx: Ledger input ---

class InvalidLedgerStateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Invalid ledger state: {detail}")


class UnknownPlayerError(InvalidLedgerStateError):
    def __init__(self, player_id: str, transaction_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"transaction {transaction_id} references unknown player {player_id}")


# --- 2xxx: Settlement ---

class UnbalancedInputError(AppError):
    def __init__(self, total: int, tolerance: int) -> None:
        self.total = total
        self.tolerance = tolerance
        super().__init__(
            2001,
            f"Net positions sum to {total} cents, outside tolerance of ±{tolerance} cents",
        )


# --- 9xxx: System ---

class PrecisionOverflowError(AppError):
    def __init__(self, what: str, value: int) -> None:
        super().__init__(9001, f"{what} exceeds representable range: {value}")
