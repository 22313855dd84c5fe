"""Tests for pl_common.errors."""

from src.pl_common.errors import (
    AppError,
    InvalidLedgerStateError,
    PrecisionOverflowError,
    UnbalancedInputError,
    UnknownPlayerError,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert str(err) == "Internal error"

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_invalid_ledger_state(self) -> None:
        err = InvalidLedgerStateError("negative amount")
        assert err.code == 1001
        assert "negative amount" in err.message

    def test_unknown_player_is_invalid_ledger_state(self) -> None:
        err = UnknownPlayerError("p9", "tx-7")
        assert isinstance(err, InvalidLedgerStateError)
        assert err.code == 1001
        assert err.player_id == "p9"
        assert "tx-7" in err.message

    def test_unbalanced_input(self) -> None:
        err = UnbalancedInputError(total=137, tolerance=1)
        assert err.code == 2001
        assert err.total == 137
        assert "137" in err.message

    def test_precision_overflow(self) -> None:
        err = PrecisionOverflowError("buy-in total", 2**64)
        assert err.code == 9001
        assert "buy-in total" in err.message
