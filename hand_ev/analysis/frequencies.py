"""Base response frequencies and the adjustment cascade.

Every function here is a pure mapping from the decision's features and
the opponent's range profile to one number (or one fold/call/raise
triple). ``frequency_inputs`` runs them all; the response model
assembles the result.
"""

from __future__ import annotations

from dataclasses import dataclass

from hand_ev.analysis.action_context import ActionContext
from hand_ev.analysis.action_features import ActionFeatures
from hand_ev.analysis.config import ModelConfig, Triple
from hand_ev.analysis.range_strength import RangeStrength
from hand_ev.utils.constants import (
    AGGRESSIVE_ACTIONS,
    ActionKind,
    BetSizing,
    BoardTextureKind,
    GameType,
    Street,
)

_LARGE = (BetSizing.LARGE, BetSizing.VERY_LARGE)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _ladder(x: float, steps: tuple[tuple[float, float], ...], default: float) -> float:
    """Value of the first ``(bound, value)`` step with ``x < bound``."""
    for bound, value in steps:
        if x < bound:
            return value
    return default


# ---------------------------------------------------------------------------
# Street priors
# ---------------------------------------------------------------------------

def street_pattern(f: ActionFeatures, strength: RangeStrength,
                   model: ModelConfig) -> Triple:
    """Street table frequencies for the bet size, refined by street patterns.

    The refined triple is clamped and renormalised. Preflop and unsized
    actions use the neutral triple.
    """
    table = model.street_base_frequencies.get(f.street.value, {})
    base = table.get(f.sizing.value)
    if base is None:
        return model.neutral_frequencies

    avg = strength.average
    fold = call = rse = 0.0
    large = f.sizing in _LARGE
    if f.street == Street.FLOP:
        fold += 0.1 if f.is_cbet else 0.0
        fold += -0.15 if avg > 0.7 else 0.15 if avg < 0.4 else 0.0
        fold += 0.1 if large else 0.0
        call += 0.1 if f.pot_odds < 0.3 else 0.0
        call += 0.15 if strength.drawing > 0.3 else 0.0
        call += 0.1 if 0.4 <= avg <= 0.7 else 0.0
        rse += 0.1 if avg > 0.8 else 0.0
        rse += 0.05 if f.is_check_raise else 0.0
        rse += 0.05 if f.sizing == BetSizing.SMALL else 0.0
    elif f.street == Street.TURN:
        fold += -0.1 + (0.2 if avg < 0.3 else 0.0) + (0.15 if large else 0.0)
        call += 0.15 + (0.1 if f.pot_odds < 0.25 else 0.0)
        call += 0.2 if strength.drawing > 0.2 else 0.0
        rse += -0.05 + (0.15 if avg > 0.9 else 0.0) - (0.1 if f.is_value_bet else 0.0)
    elif f.street == Street.RIVER:
        fold += -0.15 + (0.25 if avg < 0.4 else 0.0) + (0.2 if large else 0.0)
        call += 0.2 + (0.15 if f.pot_odds < 0.2 else 0.0)
        call += 0.1 if avg >= 0.5 else 0.0
        rse += 0.05 + (0.2 if avg > 0.95 else 0.0) + (0.1 if f.is_bluff else 0.0)

    out = [_clamp(b + a, 0.0, 1.0) for b, a in zip(base, (fold, call, rse))]
    total = sum(out)
    if total <= 0:
        return base
    return (out[0] / total, out[1] / total, out[2] / total)


# ---------------------------------------------------------------------------
# Base fold frequency
# ---------------------------------------------------------------------------

def gto_fold(f: ActionFeatures, model: ModelConfig) -> float:
    if f.sizing == BetSizing.ALL_IN:
        return _ladder(f.pot_odds, ((0.2, 0.3), (0.3, 0.5), (0.4, 0.7)), 0.9)
    return model.gto_fold_by_sizing.get(f.sizing.value, 0.5)


def bet_sizing_fold(f: ActionFeatures) -> float:
    ratio = f.bet_to_pot
    if f.sizing == BetSizing.SMALL:
        return 0.35 + ratio * 0.5
    if f.sizing == BetSizing.MEDIUM:
        return 0.5 + ratio * 0.3
    if f.sizing == BetSizing.LARGE:
        return 0.75 + ratio * 0.15
    if f.sizing == BetSizing.VERY_LARGE:
        return 0.85 + ratio * 0.1
    if f.sizing == BetSizing.ALL_IN:
        return _ladder(
            f.pot_odds, ((0.15, 0.2), (0.25, 0.4), (0.35, 0.6), (0.45, 0.8)), 0.9,
        )
    return 0.5


def pot_odds_fold(f: ActionFeatures, strength: RangeStrength) -> float:
    fold = _ladder(
        f.pot_odds, ((0.2, 0.2), (0.3, 0.35), (0.4, 0.5), (0.5, 0.7)), 0.85,
    )
    if f.implied_odds > 1.5:
        fold *= 0.8
    elif f.implied_odds < 1.0:
        fold *= 1.2
    if strength.average > 0.7:
        fold *= 0.7
    elif strength.average < 0.3:
        fold *= 1.3
    return fold


def range_fold(f: ActionFeatures, strength: RangeStrength) -> float:
    avg = strength.average
    if avg > 0.8:
        fold = 0.2
    elif avg > 0.6:
        fold = 0.35
    elif avg > 0.4:
        fold = 0.5
    elif avg > 0.2:
        fold = 0.7
    else:
        fold = 0.85

    if strength.strong > 0.3:
        fold *= 0.6
    if strength.weak > 0.5:
        fold *= 1.4
    if strength.drawing > 0.3:
        if f.sizing == BetSizing.SMALL:
            fold *= 0.7
        elif f.sizing in _LARGE:
            fold *= 1.2
    if f.is_cbet and avg > 0.6:
        fold *= 0.8
    if f.is_value_bet and avg < 0.5:
        fold *= 1.3
    return fold


def base_fold(f: ActionFeatures, strength: RangeStrength, street_fold: float,
              model: ModelConfig) -> float:
    """Weighted blend of the five fold estimates, clamped to the base bounds."""
    w = model.base_fold_weights
    fold = (
        w["gto"] * gto_fold(f, model)
        + w["bet_sizing"] * bet_sizing_fold(f)
        + w["pot_odds"] * pot_odds_fold(f, strength)
        + w["range_strength"] * range_fold(f, strength)
        + w["street"] * street_fold
    )
    lo, hi = model.base_fold_bounds
    return _clamp(fold, lo, hi)


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------

def range_adjustment(f: ActionFeatures, strength: RangeStrength,
                     model: ModelConfig) -> float:
    """Fold adjustment from the shape of the range, within the envelope."""
    strong = 0.0
    if strength.strong > 0.4:
        strong -= 0.3
    elif strength.strong > 0.25:
        strong -= 0.2
    elif strength.strong > 0.15:
        strong -= 0.1
    if strength.top_share > 0.2:
        strong -= 0.15
    if f.is_cbet and strength.strong > 0.3:
        strong -= 0.1
    if f.is_value_bet and strength.strong > 0.4:
        strong += 0.1

    weak = 0.0
    if strength.weak > 0.5:
        weak += 0.4
    elif strength.weak > 0.35:
        weak += 0.25
    elif strength.weak > 0.2:
        weak += 0.15
    if strength.bottom_share > 0.3:
        weak += 0.2
    if f.is_bluff and strength.weak > 0.4:
        weak -= 0.1
    if f.sizing == BetSizing.SMALL and strength.weak > 0.3:
        weak -= 0.05

    drawing = 0.0
    if strength.drawing > 0.3:
        if f.sizing == BetSizing.SMALL:
            drawing -= 0.2
        elif f.sizing == BetSizing.MEDIUM:
            drawing += -0.1 if f.implied_odds > 1.5 else 0.1
        elif f.sizing in _LARGE:
            drawing += -0.05 if f.implied_odds > 2.0 else 0.3
    if f.street == Street.FLOP and strength.drawing > 0.25:
        drawing -= 0.05
    elif f.street == Street.TURN and strength.drawing > 0.2:
        drawing += 0.1
    elif f.street == Street.RIVER and strength.drawing > 0.15:
        drawing += 0.2

    overall = 0.3 * strong + 0.3 * weak + 0.2 * drawing
    if strength.average > 0.7:
        overall -= 0.15
    elif strength.average < 0.3:
        overall += 0.15
    env = model.range_adjustment_envelope
    return _clamp(overall, -env, env)


def _street_offset(street: Street, flop: float, turn: float, river: float) -> float:
    return {Street.FLOP: flop, Street.TURN: turn, Street.RIVER: river}.get(street, 0.0)


def position_adjustment(ctx: ActionContext, f: ActionFeatures,
                        model: ModelConfig) -> float:
    """Fold adjustment from the responder's seat relative to the hero.

    The villain folds less in position and more out of position; blind
    battles fold less again.
    """
    offsets = model.position_offsets
    bet = f.kind == ActionKind.BET
    small = f.sizing == BetSizing.SMALL
    large = f.sizing in _LARGE

    in_pos = out_pos = bvb = 0.0
    if not ctx.in_position:
        in_pos = offsets["in_position"]
        if bet:
            in_pos += -0.05 if small else 0.05 if large else 0.0
        if f.kind == ActionKind.RAISE:
            in_pos -= 0.10
        in_pos += _street_offset(f.street, -0.05, -0.03, 0.02)
        in_pos += -0.08 if f.is_cbet else 0.0
        in_pos += 0.05 if f.is_value_bet else 0.0
    else:
        out_pos = offsets["out_of_position"]
        if bet:
            out_pos += 0.05 if small else 0.10 if large else 0.0
        if f.kind == ActionKind.RAISE:
            out_pos += 0.15
        out_pos += _street_offset(f.street, 0.03, 0.05, 0.08)
        out_pos += 0.10 if f.is_cbet else 0.0
        out_pos += -0.05 if f.is_bluff else 0.0

    if ctx.blind_vs_blind:
        bvb = offsets["blind_vs_blind"]
        bvb += {"BB": -0.05, "SB": -0.03}.get(ctx.villain_label, 0.0)
        if bet:
            bvb += -0.08 if small else 0.05 if large else 0.0
        if f.kind == ActionKind.RAISE:
            bvb -= 0.05
        bvb += _street_offset(f.street, -0.05, -0.03, 0.02)

    env = model.position_envelope
    return _clamp(0.4 * in_pos + 0.4 * out_pos + 0.2 * bvb, -env, env)


def stack_category(spr: float) -> str:
    if spr >= 10:
        return "deep"
    if spr >= 3:
        return "medium"
    if spr >= 1:
        return "short"
    return "all_in"


def stack_adjustment(ctx: ActionContext, f: ActionFeatures,
                     model: ModelConfig) -> float:
    """Fold adjustment from stack depth, as a fraction.

    Deep stacks fold less, short and all-in stacks fold more.
    """
    category = stack_category(f.spr)
    points = model.stack_base_points[category]
    late = ctx.villain_label in ("BTN", "CO")

    if category == "deep":
        points += 2.0 if late else 0.0
        points += _street_offset(f.street, -3.0, -4.0, -5.0)
        if f.kind == ActionKind.BET and f.sizing in _LARGE:
            points -= 3.0
        if f.implied_odds > 3.0:
            points -= 2.0
        points = _clamp(points, -15.0, -5.0)
    elif category == "medium":
        points += _street_offset(f.street, 1.0, 2.0, 3.0)
        if f.kind == ActionKind.BET:
            points += 2.0 if f.sizing in _LARGE else -1.0
        points -= 1.0 if late else 0.0
        points = _clamp(points, -2.0, 5.0)
    elif category == "short":
        points += _street_offset(f.street, 3.0, 4.0, 5.0)
        points += 2.0 if f.pot_odds > 0.3 else 0.0
        points += 3.0 if f.spr < 5 else 0.0
        points = _clamp(points, 10.0, 20.0)
    else:
        points += 2.0 if f.kind in AGGRESSIVE_ACTIONS else 0.0
        points += _street_offset(f.street, 2.0, 3.0, 4.0)
        if ctx.game_type == GameType.TOURNAMENT:
            points += 0.3 * 10.0
        points = _clamp(points, 20.0, 30.0)

    lo, hi = model.stack_bounds_points
    return _clamp(points, lo, hi) / 100.0


def multiway_adjustment(ctx: ActionContext, f: ActionFeatures,
                        aggression: float, model: ModelConfig) -> float:
    """Fold adjustment from the number of players still in the hand."""
    offsets = model.multiway_offsets
    small = f.sizing == BetSizing.SMALL
    large = f.sizing in _LARGE
    raise_ = f.kind == ActionKind.RAISE

    if ctx.active_players <= 2:
        adj = offsets["heads_up"]
        adj += -0.05 if small else 0.03 if large else 0.0
        adj -= 0.08 if raise_ else 0.0
        adj += _street_offset(f.street, -0.05, -0.03, 0.02)
        adj -= 0.05 if f.is_cbet else 0.0
        adj += 0.03 if f.is_bluff else 0.0
    elif ctx.active_players == 3:
        adj = offsets["three_way"]
        adj += 0.03 if small else 0.08 if large else 0.0
        adj += 0.05 if raise_ else 0.0
        adj += _street_offset(f.street, 0.02, 0.05, 0.08)
        adj += 0.03 if f.is_cbet else 0.0
        adj += 0.05 if f.is_check_raise else 0.0
        adj += 0.02 if ctx.players_left_to_act > 0 else 0.0
    else:
        adj = offsets["four_plus"]
        adj += 0.05 if small else 0.12 if large else 0.0
        adj += 0.10 if raise_ else 0.0
        adj += _street_offset(f.street, 0.05, 0.08, 0.12)
        adj += 0.08 if f.is_cbet else 0.0
        adj += 0.10 if f.is_check_raise else 0.0
        adj += 0.05 if ctx.players_left_to_act > 1 else 0.0
        adj += 0.03 if aggression > 0.5 else 0.0

    lo, hi = model.multiway_bounds
    return _clamp(adj, lo, hi)


def base_raise(f: ActionFeatures) -> float:
    """Raise frequency implied by the price of a raise."""
    odds = f.pot_odds
    if odds <= 0.2:
        freq = 0.15
    elif odds <= 0.33:
        freq = 0.12
    elif odds <= 0.5:
        freq = 0.08
    elif odds <= 0.75:
        freq = 0.05
    else:
        freq = 0.02
    if f.kind == ActionKind.BET:
        freq *= 1.2
    elif f.kind == ActionKind.RAISE:
        freq *= 0.7
    return _clamp(freq, 0.01, 0.3)


def minimum_defense(f: ActionFeatures) -> float:
    if f.amount <= 0 or f.pot <= 0:
        return 0.0
    return f.amount / (f.pot + f.amount)


def sizing_raise_frequency(f: ActionFeatures, strength: RangeStrength,
                           current: float, model: ModelConfig) -> float:
    """Raise frequency induced by the bet size and the range's shape."""
    if f.sizing == BetSizing.ALL_IN:
        return 0.0

    range_mult = 1.0
    if strength.label == "strong":
        range_mult *= 1.3
    elif strength.label == "weak":
        range_mult *= 0.7
    if strength.polarization > 0.7:
        range_mult *= 1.1
    if strength.drawing > 0.2:
        range_mult *= 1.05
    range_mult = _clamp(range_mult, 0.3, 2.0)

    sizing_mult = model.raise_induction.get(f.sizing.value, 1.0)
    if f.bet_to_pot > 3.0:
        sizing_mult *= 0.7
    elif f.bet_to_pot < 0.2:
        sizing_mult *= 1.2
    sizing_mult = _clamp(sizing_mult, 0.0, 3.0)

    freq = current * range_mult * sizing_mult
    freq = min(freq, min(0.8, strength.strong + 0.1))
    if strength.strong > 0.4:
        freq = max(freq, 0.05)
    return _clamp(freq, 0.0, 0.8)


def aggression_share(ctx: ActionContext) -> float:
    """Share of the villain's voluntary actions that were bets or raises."""
    voluntary = [a for a in ctx.villain_actions if a.kind != ActionKind.POST]
    if not voluntary:
        return 0.0
    return sum(1 for a in voluntary if a.kind in AGGRESSIVE_ACTIONS) / len(voluntary)


def texture_adjustment(f: ActionFeatures, strength: RangeStrength,
                       model: ModelConfig) -> Triple:
    kind = strength.texture.kind
    fold, call, rse = model.texture_offsets.get(kind.value, (0.0, 0.0, 0.0))
    avg = strength.average

    if kind == BoardTextureKind.DRY and avg > 0.7:
        fold, call = fold - 0.1, call + 0.1
    elif kind == BoardTextureKind.SUITED and avg < 0.3:
        fold, call = fold + 0.1, call - 0.1

    suited = kind == BoardTextureKind.SUITED
    dry = kind == BoardTextureKind.DRY
    if f.street == Street.FLOP and suited:
        call += 0.05
    elif f.street == Street.TURN:
        call += 0.1 if suited else 0.0
        fold += 0.05 if dry else 0.0
    elif f.street == Street.RIVER:
        call += 0.15 if suited else 0.0
        fold += 0.1 if dry else 0.0
    return (fold, call, rse)


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FrequencyInputs:
    """Base frequencies and every adjustment for one decision."""

    street_pattern: Triple
    base_fold: float
    base_raise: float
    range_adjustment: float
    position_adjustment: float
    stack_adjustment: float
    multiway_adjustment: float
    raise_frequency: float
    mdf: float
    aggression: float
    texture_adjustment: Triple


def frequency_inputs(ctx: ActionContext, f: ActionFeatures,
                     strength: RangeStrength, model: ModelConfig) -> FrequencyInputs:
    pattern = street_pattern(f, strength, model)
    raise_base = base_raise(f)
    aggression = aggression_share(ctx)
    return FrequencyInputs(
        street_pattern=pattern,
        base_fold=base_fold(f, strength, pattern[0], model),
        base_raise=raise_base,
        range_adjustment=range_adjustment(f, strength, model),
        position_adjustment=position_adjustment(ctx, f, model),
        stack_adjustment=stack_adjustment(ctx, f, model),
        multiway_adjustment=multiway_adjustment(ctx, f, aggression, model),
        raise_frequency=sizing_raise_frequency(f, strength, raise_base, model),
        mdf=minimum_defense(f),
        aggression=aggression,
        texture_adjustment=texture_adjustment(f, strength, model),
    )
