"""Opponent ranges: preflop weights, action updates and conditional ranges.

A range is a plain ``dict`` mapping a canonical combo (high card first)
to a weight in [0, 1]. After every update the range is pruned and
normalised so the weights sum to 1; the empty range is ``{}``.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from hand_ev.core.hand_evaluator import categorize_hand, draw_types
from hand_ev.core.hand_record import BettingAction
from hand_ev.utils.card import Card, Combo, all_combos
from hand_ev.utils.constants import ActionKind, DrawType, StrengthCategory

Range = dict[Combo, float]

MIN_UPDATED_WEIGHT = 0.0001
PRUNE_THRESHOLD = 0.001
SMALL_RANGE_PRUNE_THRESHOLD = 0.0001
SMALL_RANGE_SIZE = 50
FALLBACK_WEIGHT = 0.2


# ---------------------------------------------------------------------------
# Preflop weights
# ---------------------------------------------------------------------------

# Per high card: pair weight, named kickers as (suited, offsuit), then a
# linear series for the remaining kickers: (top kicker, suited at top,
# offsuit at top, step per rank below the top).
_PREFLOP_FAMILIES: dict[int, tuple[float, dict[int, tuple[float, float]],
                                   tuple[int, float, float, float] | None]] = {
    14: (1.00, {13: (0.98, 0.95), 12: (0.96, 0.92), 11: (0.94, 0.89),
                10: (0.92, 0.86)}, (9, 0.90, 0.80, 0.025)),
    13: (0.98, {12: (0.93, 0.88), 11: (0.91, 0.85), 10: (0.89, 0.82)},
         (9, 0.85, 0.75, 0.025)),
    12: (0.96, {11: (0.91, 0.85), 10: (0.88, 0.80)}, (9, 0.82, 0.72, 0.025)),
    11: (0.94, {10: (0.86, 0.78)}, (9, 0.78, 0.68, 0.025)),
    10: (0.92, {9: (0.84, 0.76)}, (9, 0.76, 0.66, 0.0286)),
    9: (0.90, {8: (0.74, 0.66)}, (8, 0.66, 0.56, 0.0333)),
    8: (0.85, {7: (0.72, 0.62)}, (7, 0.62, 0.52, 0.04)),
    7: (0.80, {6: (0.60, 0.50)}, (6, 0.50, 0.40, 0.05)),
    6: (0.75, {5: (0.52, 0.42)}, (5, 0.42, 0.32, 0.0333)),
    5: (0.70, {4: (0.38, 0.28)}, (3, 0.28, 0.18, 0.04)),
    4: (0.65, {3: (0.22, 0.16), 2: (0.20, 0.14)}, None),
    3: (0.60, {2: (0.18, 0.12)}, None),
    2: (0.55, {}, None),
}


def preflop_weight(combo: Combo) -> float:
    """Heuristic likelihood that a player continues with ``combo`` preflop."""
    high, low = sorted((combo[0].value, combo[1].value), reverse=True)
    pair, named, series = _PREFLOP_FAMILIES[high]
    if high == low:
        return pair
    suited = combo[0].suit == combo[1].suit
    if low in named:
        s, o = named[low]
        return s if suited else o
    if series is not None:
        top, s, o, step = series
        return (s if suited else o) - (top - low) * step
    return FALLBACK_WEIGHT


def initial_range(dead: Iterable[Card] = ()) -> Range:
    """Normalised preflop range over every combo that avoids the dead cards."""
    return normalize({c: preflop_weight(c) for c in all_combos(dead)}, threshold=0.0)


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------

_MONSTERS = {StrengthCategory.STRAIGHT_FLUSH, StrengthCategory.QUADS,
             StrengthCategory.FULL_HOUSE}
_STRONG = {StrengthCategory.FLUSH, StrengthCategory.STRAIGHT,
           StrengthCategory.SET, StrengthCategory.TWO_PAIR}
_TOP = {StrengthCategory.OVERPAIR, StrengthCategory.TOP_PAIR}
_WEAK_PAIRS = {StrengthCategory.SECOND_PAIR, StrengthCategory.PAIR}


def action_multiplier(kind: ActionKind, category: StrengthCategory,
                      draws: list[DrawType]) -> float:
    """Weight factor for a combo of ``category`` taking action ``kind``."""
    aggressive = kind in (ActionKind.BET, ActionKind.RAISE)
    if category in _MONSTERS:
        return 2.0 if aggressive else 1.5
    if category in _STRONG:
        return 1.5
    if category in _TOP:
        return 1.2
    if DrawType.COMBO in draws:
        return 1.2 if aggressive else 1.1
    if DrawType.FLUSH in draws or DrawType.OESD in draws:
        return 1.1 if aggressive else 0.8
    if DrawType.GUTSHOT in draws:
        return 0.9 if aggressive else 0.6
    if category in _WEAK_PAIRS:
        return 0.7 if aggressive else 0.5
    if category == StrengthCategory.AIR:
        return 0.05 if aggressive else 0.01
    return 0.5 if aggressive else 0.3


def normalize(rng: Mapping[Combo, float], threshold: float | None = None) -> Range:
    """Drop negligible combos and rescale the rest to sum to 1.

    A combo is negligible when it weighs less than ``threshold`` times the
    heaviest combo. The default threshold is relaxed for small ranges so a
    narrow range is not pruned away. Returns ``{}`` when nothing survives.
    """
    if threshold is None:
        threshold = (
            SMALL_RANGE_PRUNE_THRESHOLD if len(rng) < SMALL_RANGE_SIZE
            else PRUNE_THRESHOLD
        )
    heaviest = max(rng.values(), default=0.0)
    if heaviest <= 0:
        return {}
    kept = {c: w for c, w in rng.items() if w > 0 and w >= threshold * heaviest}
    total = sum(kept.values())
    if total <= 0:
        return {}
    return {c: w / total for c, w in kept.items()}


def remove_dead(rng: Mapping[Combo, float], dead: Iterable[Card]) -> Range:
    dead_set = set(dead)
    return {c: w for c, w in rng.items() if not dead_set.intersection(c)}


def update_range(rng: Mapping[Combo, float], kind: ActionKind,
                 board: list[Card], dead: Iterable[Card] = ()) -> Range:
    """Reshape a range after its owner takes an action on ``board``.

    A fold ends the range. Checks and calls favour made hands that
    continue passively, bets and raises favour the strongest holdings.
    Posts carry no information. The result is dead-card filtered and
    normalised.
    """
    if kind == ActionKind.FOLD:
        return {}
    rng = remove_dead(rng, [*board, *dead])
    if kind == ActionKind.POST:
        return normalize(rng)

    # Multipliers apply to weights relative to the heaviest combo.
    heaviest = max(rng.values(), default=0.0)
    if heaviest <= 0:
        return {}
    updated: Range = {}
    for combo, weight in rng.items():
        weight = weight / heaviest
        category = categorize_hand(combo, board)
        draws = draw_types(combo, board)
        new_weight = weight * action_multiplier(kind, category, draws)
        if new_weight > 0:
            new_weight = max(new_weight, MIN_UPDATED_WEIGHT)
        updated[combo] = new_weight
    return normalize(updated)


def range_after_actions(actions: Iterable[BettingAction], boards: Mapping[int, list[Card]],
                        dead: Iterable[Card]) -> Range:
    """Replay one player's actions from the preflop range.

    Args:
        actions: The player's actions in play order.
        boards: Board visible at each action, keyed by ``action.index``.
        dead: Cards the player cannot hold (hero hole cards and the board).

    Returns:
        The normalised range after the last action.
    """
    dead = list(dead)
    rng = initial_range(dead)
    for action in actions:
        rng = update_range(rng, action.kind, boards.get(action.index, []), dead)
        if not rng:
            break
    return rng


def conditional_range(rng: Mapping[Combo, float], kind: ActionKind,
                      board: list[Card], dead: Iterable[Card] = ()) -> Range:
    """The part of ``rng`` that would respond to the hero with ``kind``.

    Only a call or a raise continues against a bet.
    """
    if kind not in (ActionKind.CALL, ActionKind.RAISE):
        raise ValueError(f"{kind} is not a response that continues: expected call or raise")
    return update_range(rng, kind, board, dead)


def total_weight(rng: Mapping[Combo, float]) -> float:
    return float(sum(rng.values()))
