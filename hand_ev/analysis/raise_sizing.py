"""Villain raise sizes and how often each is used.

The raise branch of the EV tree needs one raise amount ``r``. It is the
weighted mean of a small catalogue of sizes, with weights picked by the
stack-to-pot ratio.
"""

from __future__ import annotations

from dataclasses import dataclass

SIZE_NAMES = ("small", "medium", "large", "all_in")

_WEIGHTS_BY_SPR: tuple[tuple[float, tuple[float, float, float, float]], ...] = (
    (2.0, (0.45, 0.25, 0.10, 0.20)),
    (4.0, (0.40, 0.35, 0.20, 0.05)),
    (8.0, (0.35, 0.40, 0.20, 0.05)),
)
_DEEP_WEIGHTS = (0.30, 0.40, 0.25, 0.05)


@dataclass(frozen=True)
class RaiseSizing:
    """Raise amounts keyed by name, their weights and the weighted mean."""

    sizes: dict[str, float]
    weights: dict[str, float]
    expected: float


def raise_sizes(bet: float, pot: float, effective_stack: float, spr: float) -> dict[str, float]:
    """Catalogue of plausible villain raise amounts facing ``bet``.

    Small and medium are multiples of the bet, tightened at low SPR and
    widened at high SPR. Large is a jam at SPR <= 2, else the larger of 4x
    and a pot-sized raise. ``effective_stack`` is the stack before the bet;
    every size is clipped to what is left behind once the bet is in, so a
    hero jam leaves no raise at all.
    """
    small_x, medium_x = 2.75, 3.5
    if spr <= 1.5:
        small_x, medium_x = 1.5, 2.0
    elif spr <= 3:
        small_x, medium_x = 2.0, 2.75
    elif spr >= 8:
        small_x, medium_x = 3.0, 4.0

    stack = max(0.0, effective_stack - bet)
    large = stack if spr <= 2 else max(4 * bet, pot + 2 * bet)
    sizes = {
        "small": small_x * bet,
        "medium": medium_x * bet,
        "large": large,
        "all_in": stack,
    }
    return {name: min(amount, stack) for name, amount in sizes.items()}


def size_weights(spr: float) -> dict[str, float]:
    for bound, weights in _WEIGHTS_BY_SPR:
        if spr <= bound:
            return dict(zip(SIZE_NAMES, weights))
    return dict(zip(SIZE_NAMES, _DEEP_WEIGHTS))


def raise_sizing(bet: float, pot: float, effective_stack: float, spr: float) -> RaiseSizing:
    sizes = raise_sizes(bet, pot, effective_stack, spr)
    weights = size_weights(spr)
    expected = sum(sizes[name] * weights[name] for name in SIZE_NAMES)
    return RaiseSizing(sizes=sizes, weights=weights, expected=expected)
