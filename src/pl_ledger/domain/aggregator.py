"""Balance aggregation: ledger transactions + chip counts -> PlayerPosition per player."""

import logging
from collections.abc import Iterable, Mapping, Sequence

from src.pl_common.cents import check_representable, require_minor_units
from src.pl_common.enums import TransactionType
from src.pl_common.errors import InvalidLedgerStateError, UnknownPlayerError
from src.pl_ledger.domain.models import BankBalance, PlayerPosition, TransactionRecord

logger = logging.getLogger(__name__)

_KNOWN_TYPES = {t.value for t in TransactionType}


def aggregate(
    transactions: Iterable[TransactionRecord],
    chip_counts: Mapping[str, int],
    player_names: Mapping[str, str] | None = None,
) -> list[PlayerPosition]:
    """Sum buy-ins and cash-outs per player and attach current chip counts.

    The roster is the key set of chip_counts; a player who already left the
    table is listed with 0 chips. Voided transactions are skipped. Output is
    sorted by player_id.

    Raises InvalidLedgerStateError for unknown players, unknown transaction
    types, or negative / non-finite / fractional amounts, and
    PrecisionOverflowError when a running total leaves the 64-bit range.
    """
    names = player_names or {}
    chips: dict[str, int] = {}
    for player_id, count in chip_counts.items():
        chips[player_id] = require_minor_units(count, f"chip count for {player_id}")

    buy_ins = dict.fromkeys(chips, 0)
    cash_outs = dict.fromkeys(chips, 0)
    skipped = 0

    for tx in transactions:
        if tx.is_voided:
            skipped += 1
            continue
        if tx.player_id not in chips:
            raise UnknownPlayerError(tx.player_id, tx.id)
        amount = require_minor_units(tx.amount, f"transaction {tx.id} amount")
        tx_type = tx.type.value if isinstance(tx.type, TransactionType) else tx.type
        if tx_type not in _KNOWN_TYPES:
            raise InvalidLedgerStateError(f"transaction {tx.id} has unknown type {tx.type!r}")
        if tx_type == TransactionType.BUY_IN.value:
            buy_ins[tx.player_id] = check_representable(
                buy_ins[tx.player_id] + amount, f"buy-in total for {tx.player_id}"
            )
        else:
            cash_outs[tx.player_id] = check_representable(
                cash_outs[tx.player_id] + amount, f"cash-out total for {tx.player_id}"
            )

    positions = [
        PlayerPosition(
            player_id=player_id,
            player_name=names.get(player_id, player_id),
            total_buy_ins=buy_ins[player_id],
            total_cash_outs=cash_outs[player_id],
            current_chips=chips[player_id],
            is_active=chips[player_id] > 0 or cash_outs[player_id] == 0,
        )
        for player_id in sorted(chips)
    ]
    for p in positions:
        check_representable(p.net_position, f"net position for {p.player_id}")

    logger.debug(
        "Aggregated %d players (%d voided transactions skipped)", len(positions), skipped
    )
    return positions


def calculate_bank_balance(
    positions: Sequence[PlayerPosition], tolerance: int = 0
) -> BankBalance:
    """Session-wide bank: total buy-ins, cash-outs, chips still on the table."""
    bank = BankBalance(
        total_buy_ins=sum(p.total_buy_ins for p in positions),
        total_cash_outs=sum(p.total_cash_outs for p in positions),
        total_chips_in_play=sum(p.current_chips for p in positions if p.is_active),
        tolerance=tolerance,
    )
    if not bank.is_balanced:
        logger.warning(
            "Bank discrepancy: cash_outs(%d) + chips(%d) - buy_ins(%d) = %d",
            bank.total_cash_outs,
            bank.total_chips_in_play,
            bank.total_buy_ins,
            bank.discrepancy,
        )
    return bank
