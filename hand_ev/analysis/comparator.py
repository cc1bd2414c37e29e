"""Hero alternatives at a decision node and the +EV / -EV verdict."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from hand_ev.analysis.action_context import ActionContext
from hand_ev.analysis.results import Candidate, Classification, r3
from hand_ev.utils.constants import ActionKind

CHECK = "check"
ALL_IN = "all_in"


def hero_label(ctx: ActionContext) -> str:
    return ctx.action.kind.value


def alternative_actions(ctx: ActionContext, sizings: Sequence[float],
                        include_all_in: bool = True) -> list[tuple[str, float]]:
    """Other things the hero could have done, as ``(label, amount)`` pairs.

    Check first, then a bet (or raise) at each pot fraction, then all-in.
    Sizes equal to the hero's own amount, or above the effective stack,
    are skipped, and so are repeats.
    """
    verb = "raise" if ctx.action.kind == ActionKind.RAISE else "bet"
    stack = ctx.effective_stack
    seen = {round(ctx.hero_amount, 2)}
    out: list[tuple[str, float]] = [(CHECK, 0.0)]

    for fraction in sizings:
        amount = round(fraction * ctx.pot, 2)
        if amount <= 0 or amount > stack or amount in seen:
            continue
        seen.add(amount)
        out.append((f"{verb}_{round(fraction * 100)}", amount))

    if include_all_in and stack > 0 and round(stack, 2) not in seen:
        out.append((ALL_IN, stack))
    return out


def rank_candidates(candidates: Sequence[Candidate]) -> list[Candidate]:
    """Sort by EV descending. Equal EVs keep their input order."""
    return sorted(candidates, key=lambda c: -r3(c.ev))


@dataclass(frozen=True)
class Comparison:
    best: Candidate
    ties: tuple[Candidate, ...]
    delta: float
    classification: Classification
    ranked: tuple[Candidate, ...]


def classify(hero: Candidate, candidates: Sequence[Candidate],
             threshold: float = 0.0) -> Comparison:
    """Pick the best candidate and label the hero's choice.

    Args:
        hero: The action the hero actually took.
        candidates: Every option evaluated at the node, the hero's
            included, in generation order.
        threshold: EV gap above which the hero's choice is -EV.

    Returns:
        Comparison. ``ties`` lists every other candidate whose EV equals
        the best at three decimals; ``delta`` is ``best - hero`` rounded.
    """
    ranked = rank_candidates(candidates)
    best = ranked[0]
    ties = tuple(c for c in ranked[1:] if r3(c.ev) == r3(best.ev))
    delta = r3(best.ev - hero.ev)
    label = Classification.NEGATIVE if delta > threshold else Classification.POSITIVE
    return Comparison(
        best=best, ties=ties, delta=delta, classification=label, ranked=tuple(ranked),
    )
