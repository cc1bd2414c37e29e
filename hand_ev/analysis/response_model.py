"""Opponent response distribution: assembly, validation and Nash blend.

``assemble`` applies the adjustment cascade to the base rates without
normalising. ``validate`` turns any triple into a proper distribution
with ``raise >= min_raise``. ``nash_frequencies`` is an independent
sizing-driven heuristic that replaces or blends into the validated
triple depending on how much context it had to work with.
``frequency_bands`` puts an interval around the final triple.
"""

from __future__ import annotations

from dataclasses import dataclass

from hand_ev.analysis.action_context import ActionContext
from hand_ev.analysis.action_features import ActionFeatures
from hand_ev.analysis.config import ModelConfig
from hand_ev.analysis.frequencies import FrequencyInputs, stack_category
from hand_ev.analysis.range_strength import BoardTexture, RangeStrength
from hand_ev.analysis.results import (
    Frequencies,
    FrequencyBand,
    FrequencyBands,
    ValidationTrace,
)
from hand_ev.utils.constants import BetSizing, BoardTextureKind, Street

SUM_TOLERANCE = 1e-3
NASH_SUM_TOLERANCE = 0.01
BOARD_CONFIDENCE = 0.8


@dataclass(frozen=True)
class ResponseEstimate:
    """Final response distribution and how it was reached."""

    frequencies: Frequencies
    assembled: Frequencies
    trace: ValidationTrace
    gto: Frequencies | None
    nash_confidence: float
    confidence: float
    profile: str
    reason: str | None = None


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _triple(values: tuple[float, float, float]) -> Frequencies:
    return Frequencies(fold=values[0], call=values[1], raise_=values[2])


def assemble(inputs: FrequencyInputs, model: ModelConfig,
             board_size: int) -> tuple[Frequencies, float]:
    """Apply every adjustment to the base rates.

    Returns:
        The clamped (not normalised) triple rounded to three decimals,
        and the assembly confidence.
    """
    # Call and raise start from the model rates. inputs.base_raise only seeds
    # raise_frequency, so it reaches the triple through raise_shift.
    _, base_call, base_raise = model.base_rates
    fold, call, rse = inputs.base_fold, base_call, base_raise

    fold += inputs.range_adjustment

    for shift in (inputs.position_adjustment, inputs.stack_adjustment):
        fold += shift
        call -= shift * 0.6
        rse -= shift * 0.4

    fold += inputs.multiway_adjustment

    raise_shift = inputs.raise_frequency - base_raise
    rse += raise_shift
    fold -= raise_shift * 0.6
    call -= raise_shift * 0.4

    fold_w, call_w, raise_w = model.aggression_weights
    rse += inputs.aggression * raise_w
    fold -= inputs.aggression * fold_w
    call -= inputs.aggression * call_w

    t_fold, t_call, t_raise = inputs.texture_adjustment
    fold, call, rse = fold + t_fold, call + t_call, rse + t_raise

    rse = max(rse, model.min_raise)

    confidence = _clamp(BOARD_CONFIDENCE if board_size >= 3 else 1.0, 0.1, 1.0)
    fold, call, rse = (_clamp(x * confidence, 0.0, 1.0) for x in (fold, call, rse))
    if fold + call + rse == 0:
        fold, call, rse = model.base_rates

    return _triple((round(fold, 3), round(call, 3), round(rse, 3))), confidence


def validate(freq: Frequencies, model: ModelConfig) -> tuple[Frequencies, ValidationTrace]:
    """Clamp, normalise and enforce the minimum raise probability.

    The result sums to 1 within ``SUM_TOLERANCE`` and has
    ``raise >= model.min_raise``. Raise is topped up by draining fold and
    call in proportion to their size, which keeps their order.
    """
    reasons: list[str] = []
    values = []
    for name, x in zip(("fold", "call", "raise"), freq.as_tuple()):
        clamped = _clamp(x, 0.0, 1.0)
        if clamped != x:
            reasons.append(f"clamped {name}")
        values.append(clamped)

    total = sum(values)
    if total <= 0:
        reasons.append("zero total, using neutral frequencies")
        values = list(model.neutral_frequencies)
        total = sum(values)
    if abs(total - 1.0) > SUM_TOLERANCE:
        reasons.append(f"normalised sum {total:.3f}")
    fold, call, rse = (v / total for v in values)

    if rse < model.min_raise:
        deficit = model.min_raise - rse
        rest = fold + call
        fold -= deficit * fold / rest
        call -= deficit * call / rest
        rse = model.min_raise
        reasons.append("raised raise to minimum")

    trace = ValidationTrace(was_adjusted=bool(reasons), reasons=tuple(reasons))
    return _triple((fold, call, rse)), trace


# ---------------------------------------------------------------------------
# Nash heuristic
# ---------------------------------------------------------------------------

def nash_frequencies(ctx: ActionContext, f: ActionFeatures,
                     texture: BoardTexture) -> tuple[Frequencies | None, float]:
    """Sizing, texture, position and pot-odds driven response heuristic.

    Returns:
        The heuristic triple (None when it fails its own sanity check)
        and a confidence in [0, 1] counting how many inputs were informative.
    """
    ratio = f.bet_to_pot
    if ratio <= 0.33:
        fold, call, rse = 0.3, 0.6, 0.1
    elif ratio <= 0.66:
        fold, call, rse = 0.5, 0.4, 0.1
    elif ratio <= 1.0:
        fold, call, rse = 0.7, 0.25, 0.05
    else:
        fold, call, rse = 0.8, 0.15, 0.05

    if f.street == Street.FLOP:
        call, fold = call + 0.1, fold - 0.1
    elif f.street == Street.RIVER:
        fold, call = fold + 0.1, call - 0.1

    if not ctx.in_position:
        call, fold = call + 0.1, fold - 0.1
    else:
        fold, call = fold + 0.1, call - 0.1
    if ctx.blind_vs_blind:
        rse, call = rse + 0.05, call - 0.05

    kind = texture.kind
    if kind == BoardTextureKind.SUITED:
        call, fold = call + 0.15, fold - 0.15
    elif kind == BoardTextureKind.DRY:
        fold, rse, call = fold + 0.1, rse + 0.05, call - 0.15
    elif kind in (BoardTextureKind.PAIRED, BoardTextureKind.TRIPS):
        fold, call = fold + 0.1, call - 0.1
    elif kind == BoardTextureKind.CONNECTED:
        call, fold = call + 0.1, fold - 0.1

    depth = stack_category(f.spr)
    if depth in ("short", "all_in"):
        fold, call = fold + 0.2, call - 0.2
    elif depth == "deep":
        call, fold = call + 0.1, fold - 0.1

    if f.pot_odds > 0.4:
        call, fold = call + 0.2, fold - 0.2
    elif 0 < f.pot_odds < 0.2:
        fold, call = fold + 0.2, call - 0.2

    confidence = 0.5
    confidence += 0.2 if f.pot_odds > 0 else 0.0
    confidence += 0.15 if texture.is_wet or texture.is_dry else 0.0
    confidence += 0.1 if ctx.hero_label and ctx.villain_label else 0.0
    confidence += 0.1 if depth != "medium" else 0.0
    confidence += 0.05 if f.street != Street.PREFLOP else 0.0
    confidence = min(1.0, confidence)

    values = (fold, call, rse)
    if min(values) < 0 or abs(sum(values) - 1.0) > NASH_SUM_TOLERANCE:
        return None, confidence
    return _triple(values), confidence


def blend(validated: Frequencies, gto: Frequencies, confidence: float,
          threshold: float) -> Frequencies:
    """Replace with the heuristic above ``threshold``, else mix linearly."""
    if confidence > threshold:
        return gto
    c = _clamp(confidence, 0.0, 1.0)
    return _triple(tuple(
        c * g + (1 - c) * v for g, v in zip(gto.as_tuple(), validated.as_tuple())
    ))


_PROFILE_THRESHOLDS = {
    "fold": (0.7, 0.5),
    "call": (0.6, 0.4),
    "raise": (0.3, 0.2),
}


def response_profile(freq: Frequencies) -> str:
    """Short label for the most likely response, e.g. ``fold_heavy``."""
    name, value = max(
        zip(("fold", "call", "raise"), freq.as_tuple()), key=lambda kv: kv[1],
    )
    dominant, heavy = _PROFILE_THRESHOLDS[name]
    if value > dominant:
        return f"{name}_dominant"
    if value > heavy:
        return f"{name}_heavy"
    return f"{name}_favoured"


# ---------------------------------------------------------------------------
# Frequency bands
# ---------------------------------------------------------------------------

BASE_UNCERTAINTY = {"high": 0.05, "medium": 0.10, "low": 0.20}
UNCERTAINTY_BOUNDS = (0.02, 0.4)
SMALL_RANGE_COMBOS = 10
LARGE_RANGE_COMBOS = 100


def confidence_level(score: float) -> str:
    if score > 0.8:
        return "high"
    if score >= 0.5:
        return "medium"
    return "low"


def _band(value: float, uncertainty: float) -> FrequencyBand:
    uncertainty = _clamp(uncertainty, *UNCERTAINTY_BOUNDS)
    spread = uncertainty * value
    return FrequencyBand(
        value=value,
        low=max(0.0, value - spread),
        high=min(1.0, value + spread),
        uncertainty=uncertainty,
    )


def frequency_bands(freq: Frequencies, score: float,
                    strength: RangeStrength) -> FrequencyBands:
    """Interval around each response frequency.

    The spread starts from how confident the model was and widens for
    extreme frequencies, small ranges and a range of middling strength.
    """
    level = confidence_level(score)
    base = BASE_UNCERTAINTY[level]
    fold, call, rse = freq.as_tuple()

    fold_u = base
    if 0 < strength.combos < SMALL_RANGE_COMBOS:
        fold_u += 0.05
    elif strength.combos > LARGE_RANGE_COMBOS:
        fold_u -= 0.02
    if fold > 0.8 or fold < 0.2:
        fold_u += 0.03

    call_u = base + (0.04 if call > 0.7 or call < 0.1 else 0.0)

    raise_u = base + (0.05 if strength.label == "medium" else -0.03)
    if rse > 0.4 or rse < 0.05:
        raise_u += 0.06

    return FrequencyBands(
        fold=_band(fold, fold_u),
        call=_band(call, call_u),
        raise_=_band(rse, raise_u),
        level=level,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def estimate_response(ctx: ActionContext, f: ActionFeatures, inputs: FrequencyInputs | None,
                      texture: BoardTexture, model: ModelConfig) -> ResponseEstimate:
    """Response distribution for one hero action.

    Missing inputs (no pot, no bet, no cascade) yield the neutral triple
    with ``reason="missing inputs"``; this function never raises.
    """
    if inputs is None or f.pot <= 0 or f.sizing == BetSizing.NONE:
        neutral = _triple(model.neutral_frequencies)
        return ResponseEstimate(
            frequencies=neutral,
            assembled=neutral,
            trace=ValidationTrace(),
            gto=None,
            nash_confidence=0.0,
            confidence=0.0,
            profile=response_profile(neutral),
            reason="missing inputs",
        )

    assembled, confidence = assemble(inputs, model, len(ctx.board))
    validated, trace = validate(assembled, model)

    gto = None
    nash_confidence = 0.0
    final = validated
    if model.nash_enabled:
        gto, nash_confidence = nash_frequencies(ctx, f, texture)
        if gto is not None:
            mixed = blend(validated, gto, nash_confidence, model.nash_confidence_threshold)
            final, blend_trace = validate(mixed, model)
            step = (
                "nash replaced" if nash_confidence > model.nash_confidence_threshold
                else f"nash blended at {nash_confidence:.2f}"
            )
            trace = ValidationTrace(
                was_adjusted=trace.was_adjusted or blend_trace.was_adjusted,
                reasons=trace.reasons + (step,) + blend_trace.reasons,
            )

    return ResponseEstimate(
        frequencies=final,
        assembled=assembled,
        trace=trace,
        gto=gto,
        nash_confidence=nash_confidence,
        confidence=confidence,
        profile=response_profile(final),
    )
