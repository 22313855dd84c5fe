"""Domain models for pl_ledger: pure dataclasses, no persistence dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    player_id: str
    type: str                        # TransactionType value
    amount: int                      # cents, always positive
    created_at: datetime | None = None
    is_voided: bool = False


@dataclass(frozen=True)
class PlayerPosition:
    player_id: str
    player_name: str
    total_buy_ins: int = 0           # cents
    total_cash_outs: int = 0         # cents
    current_chips: int = 0           # cents of chip value, pre-settlement only
    is_active: bool = True           # False once the player has cashed out

    @property
    def net_position(self) -> int:
        """Positive = player is owed money, negative = player owes money."""
        return self.current_chips + self.total_cash_outs - self.total_buy_ins


@dataclass(frozen=True)
class BankBalance:
    total_buy_ins: int
    total_cash_outs: int
    total_chips_in_play: int
    tolerance: int = 0

    @property
    def available_for_cash_out(self) -> int:
        """Money the organizer still holds: buy-ins not yet paid out."""
        return self.total_buy_ins - self.total_cash_outs

    @property
    def discrepancy(self) -> int:
        """Chips plus cash-outs minus buy-ins; 0 when every chip is backed by money."""
        return self.total_cash_outs + self.total_chips_in_play - self.total_buy_ins

    @property
    def is_balanced(self) -> bool:
        return abs(self.discrepancy) <= self.tolerance
