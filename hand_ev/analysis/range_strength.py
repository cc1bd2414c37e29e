"""Strength profile of an opponent range and board texture classification."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Mapping, Sequence

from hand_ev.analysis.ranges import preflop_weight
from hand_ev.core.hand_evaluator import categorize_hand, draw_types
from hand_ev.utils.card import Card, Combo
from hand_ev.utils.constants import BoardTextureKind, DrawType, StrengthCategory

CATEGORY_STRENGTH: dict[StrengthCategory, float] = {
    StrengthCategory.STRAIGHT_FLUSH: 1.0,
    StrengthCategory.QUADS: 0.98,
    StrengthCategory.FULL_HOUSE: 0.95,
    StrengthCategory.FLUSH: 0.90,
    StrengthCategory.STRAIGHT: 0.85,
    StrengthCategory.SET: 0.80,
    StrengthCategory.TRIPS: 0.78,
    StrengthCategory.TWO_PAIR: 0.75,
    StrengthCategory.OVERPAIR: 0.70,
    StrengthCategory.TOP_PAIR: 0.65,
    StrengthCategory.SECOND_PAIR: 0.55,
    StrengthCategory.PAIR: 0.45,
    StrengthCategory.PAIR_BOARD: 0.35,
    StrengthCategory.AIR: 0.20,
}

DRAW_BONUS: dict[DrawType, float] = {
    DrawType.COMBO: 0.15,
    DrawType.FLUSH: 0.10,
    DrawType.OESD: 0.08,
    DrawType.GUTSHOT: 0.05,
}

STRONG_THRESHOLD = 0.7
WEAK_THRESHOLD = 0.4
EXTREME_COMBOS = 10


@dataclass(frozen=True)
class BoardTexture:
    kind: BoardTextureKind
    max_suit: int = 0
    max_rank: int = 0

    @property
    def is_wet(self) -> bool:
        return self.kind in (BoardTextureKind.SUITED, BoardTextureKind.CONNECTED)

    @property
    def is_dry(self) -> bool:
        return self.kind == BoardTextureKind.DRY


def board_texture(board: Sequence[Card]) -> BoardTexture:
    """Classify a board. The first matching rule wins.

    trips (three of a rank), paired, suited (three of a suit), connected
    (two or more gaps of at most two ranks), semi_connected (any gap of at
    most one rank), else dry. An empty board has no texture.
    """
    if not board:
        return BoardTexture(BoardTextureKind.NONE)

    max_rank = max(Counter(c.value for c in board).values())
    max_suit = max(Counter(c.suit for c in board).values())
    if max_rank >= 3:
        return BoardTexture(BoardTextureKind.TRIPS, max_suit, max_rank)
    if max_rank == 2:
        return BoardTexture(BoardTextureKind.PAIRED, max_suit, max_rank)
    if max_suit >= 3:
        return BoardTexture(BoardTextureKind.SUITED, max_suit, max_rank)

    values = sorted({c.value for c in board})
    gaps = [b - a for a, b in zip(values, values[1:])]
    if sum(1 for g in gaps if g <= 2) >= 2:
        kind = BoardTextureKind.CONNECTED
    elif any(g <= 1 for g in gaps):
        kind = BoardTextureKind.SEMI_CONNECTED
    else:
        kind = BoardTextureKind.DRY
    return BoardTexture(kind, max_suit, max_rank)


def combo_strength(combo: Combo, board: Sequence[Card]) -> tuple[float, bool]:
    """Strength in [0, 1] of a combo on a board, and whether it is drawing."""
    if len(board) < 3:
        return preflop_weight(combo), False
    strength = CATEGORY_STRENGTH[categorize_hand(combo, board)]
    draws = draw_types(combo, board)
    strength += sum(DRAW_BONUS[d] for d in draws)
    return min(1.0, strength), bool(draws)


@dataclass(frozen=True)
class RangeStrength:
    """Weighted strength profile of a range. Shares are fractions in [0, 1]."""

    average: float
    strong: float
    medium: float
    weak: float
    drawing: float
    top_share: float
    bottom_share: float
    combos: int
    texture: BoardTexture

    @property
    def label(self) -> str:
        if self.average > 0.6:
            return "strong"
        if self.average < 0.4:
            return "weak"
        return "medium"

    @property
    def polarization(self) -> float:
        return self.strong + self.weak


def neutral_strength(board: Sequence[Card] = ()) -> RangeStrength:
    """Profile used when the range is empty."""
    return RangeStrength(
        average=0.5, strong=0.0, medium=1.0, weak=0.0, drawing=0.0,
        top_share=0.0, bottom_share=0.0, combos=0, texture=board_texture(board),
    )


def range_strength(rng: Mapping[Combo, float], board: Sequence[Card]) -> RangeStrength:
    """Profile a weighted range on a board.

    Args:
        rng: Combo weights (need not be normalised).
        board: Board visible at the decision.

    Returns:
        RangeStrength. Empty or zero-weight ranges get the neutral profile.
    """
    total = float(sum(rng.values()))
    if not rng or total <= 0:
        return neutral_strength(board)

    rows = []
    for combo, weight in rng.items():
        strength, drawing = combo_strength(combo, board)
        rows.append((strength, weight / total, drawing))

    average = sum(s * w for s, w, _ in rows)
    strong = sum(w for s, w, _ in rows if s >= STRONG_THRESHOLD)
    weak = sum(w for s, w, _ in rows if s < WEAK_THRESHOLD)
    drawing = sum(w for _, w, d in rows if d)

    rows.sort(key=lambda r: r[0], reverse=True)
    top_share = sum(w for _, w, _ in rows[:EXTREME_COMBOS])
    bottom_share = sum(w for _, w, _ in rows[-EXTREME_COMBOS:])

    return RangeStrength(
        average=min(1.0, max(0.0, average)),
        strong=strong,
        medium=max(0.0, 1.0 - strong - weak),
        weak=weak,
        drawing=drawing,
        top_share=top_share,
        bottom_share=bottom_share,
        combos=len(rng),
        texture=board_texture(board),
    )
