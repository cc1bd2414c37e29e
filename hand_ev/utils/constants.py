"""Constants for the hand EV analyser."""

from enum import IntEnum, StrEnum


class Suit(StrEnum):
    CLUBS = "c"
    DIAMONDS = "d"
    HEARTS = "h"
    SPADES = "s"


class Rank(StrEnum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "T"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


RANK_VALUES: dict[Rank, int] = {rank: value for value, rank in enumerate(Rank, start=2)}


class HandRanking(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


class Street(StrEnum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


STREET_ORDER: dict[Street, int] = {street: i for i, street in enumerate(Street)}

# Board cards visible once each street has been dealt.
BOARD_SIZE: dict[Street, int] = {
    Street.PREFLOP: 0,
    Street.FLOP: 3,
    Street.TURN: 4,
    Street.RIVER: 5,
}


class ActionKind(StrEnum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    POST = "post"


AGGRESSIVE_ACTIONS = frozenset({ActionKind.BET, ActionKind.RAISE})
# Actions that put chips into the pot.
MONEY_ACTIONS = frozenset({
    ActionKind.POST, ActionKind.CALL, ActionKind.BET, ActionKind.RAISE,
})


class BetSizing(StrEnum):
    NONE = "none"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    VERY_LARGE = "very_large"
    ALL_IN = "all_in"


class GameType(StrEnum):
    CASH = "cash"
    TOURNAMENT = "tournament"


class StrengthCategory(StrEnum):
    STRAIGHT_FLUSH = "straight_flush"
    QUADS = "quads"
    FULL_HOUSE = "full_house"
    FLUSH = "flush"
    STRAIGHT = "straight"
    SET = "set"
    TRIPS = "trips"
    TWO_PAIR = "two_pair"
    OVERPAIR = "overpair"
    TOP_PAIR = "top_pair"
    SECOND_PAIR = "second_pair"
    PAIR = "pair"
    PAIR_BOARD = "pair_board"
    AIR = "air"


class DrawType(StrEnum):
    COMBO = "combo_draw"
    FLUSH = "flush_draw"
    OESD = "oesd"
    GUTSHOT = "gutshot"


class BoardTextureKind(StrEnum):
    NONE = "none"
    TRIPS = "trips"
    PAIRED = "paired"
    SUITED = "suited"
    CONNECTED = "connected"
    SEMI_CONNECTED = "semi_connected"
    DRY = "dry"


# Full-ring seat labels clockwise from the button. Shorter tables drop
# labels from the middle of the list (the early positions go first).
POSITION_LABELS: tuple[str, ...] = (
    "BTN", "SB", "BB", "UTG", "UTG+1", "UTG+2", "LJ", "HJ", "CO",
)

# Postflop acting order: lower index acts first.
POSTFLOP_ORDER: tuple[str, ...] = (
    "SB", "BB", "UTG", "UTG+1", "UTG+2", "LJ", "HJ", "CO", "BTN",
)

BLIND_LABELS = frozenset({"SB", "BB"})
