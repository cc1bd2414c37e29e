"""Shared hand documents.

``flop_hand``: heads-up, hero on the button raises preflop, the big
blind calls and checks the flop, hero bets 3 into 5 (action 5).

``river_hand``: the same line run out to the river, where hero bluffs
T9 on a board the villain's aces crush (action 9).
"""

import pytest


def _players() -> list[dict]:
    return [
        {"id": "hero", "position": 0, "stackSize": 100, "isActive": True},
        {"id": "villain", "position": 1, "stackSize": 100, "isActive": True},
    ]


def _preflop() -> list[dict]:
    return [
        {"playerId": "hero", "action": "post", "amount": 0.5, "street": "preflop", "order": 0},
        {"playerId": "villain", "action": "post", "amount": 1, "street": "preflop", "order": 1},
        {"playerId": "hero", "action": "raise", "amount": 2, "street": "preflop", "order": 2},
        {"playerId": "villain", "action": "call", "amount": 1.5, "street": "preflop", "order": 3},
    ]


@pytest.fixture
def flop_hand() -> dict:
    return {
        "id": "h1",
        "username": "alice",
        "heroHoleCards": ["Ks", "Kd"],
        "communityCards": {"flop": ["Ah", "7c", "2d"]},
        "bettingActions": _preflop() + [
            {"playerId": "villain", "action": "check", "amount": 0, "street": "flop", "order": 4},
            {"playerId": "hero", "action": "bet", "amount": 3, "street": "flop", "order": 5},
            {"playerId": "villain", "action": "call", "amount": 3, "street": "flop", "order": 6},
        ],
        "players": _players(),
        "buttonPosition": 0,
        "heroPosition": 0,
        "gameType": "cash",
    }


@pytest.fixture
def river_hand() -> dict:
    return {
        "id": "h2",
        "username": "alice",
        "heroHoleCards": ["Td", "9d"],
        "communityCards": {"flop": ["As", "Kh", "Qc"], "turn": "2d", "river": "3h"},
        "bettingActions": _preflop() + [
            {"playerId": "villain", "action": "check", "amount": 0, "street": "flop", "order": 4},
            {"playerId": "hero", "action": "check", "amount": 0, "street": "flop", "order": 5},
            {"playerId": "villain", "action": "check", "amount": 0, "street": "turn", "order": 6},
            {"playerId": "hero", "action": "check", "amount": 0, "street": "turn", "order": 7},
            {"playerId": "villain", "action": "check", "amount": 0, "street": "river", "order": 8},
            {"playerId": "hero", "action": "bet", "amount": 4, "street": "river", "order": 9},
        ],
        "players": _players(),
        "buttonPosition": 0,
        "heroPosition": 0,
        "gameType": "cash",
    }
