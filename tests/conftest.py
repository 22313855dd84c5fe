"""Shared test fixtures."""

from collections.abc import Callable

import pytest

from src.pl_ledger.domain.models import PlayerPosition

PositionFactory = Callable[..., PlayerPosition]


def _position(player_id: str, net: int, name: str | None = None) -> PlayerPosition:
    """Winners hold chips on a $100 buy-in, losers only bought in."""
    if net >= 0:
        return PlayerPosition(player_id=player_id, player_name=name or player_id.upper(),
                              total_buy_ins=10000, current_chips=10000 + net)
    return PlayerPosition(player_id=player_id, player_name=name or player_id.upper(),
                          total_buy_ins=-net, current_chips=0)


@pytest.fixture
def make_position() -> PositionFactory:
    return _position


@pytest.fixture
def three_players() -> list[PlayerPosition]:
    # A down $50, B up $30, C up $20
    return [_position("a", -5000), _position("b", 3000), _position("c", 2000)]
