"""Range-versus-range equity for Texas Hold'em.

On a complete board every valid (hero combo, villain combo) pair is
evaluated exactly. With cards still to come the estimator draws a fixed
budget of matchups: each draw picks a pair with probability proportional
to its weight and deals one uniform runout from the remaining deck.
A single pair therefore gets every runout in the budget.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from hand_ev.core.errors import EquityInputsEmpty, InconsistentStreet
from hand_ev.core.hand_evaluator import HandEvaluator, HandResult
from hand_ev.utils.card import FULL_DECK, Card, Combo

logger = logging.getLogger("hand_ev.core.equity")

NEUTRAL_EQUITY = 0.5
DEFAULT_SAMPLES = 1_000


@dataclass(frozen=True)
class EquityResult:
    """Result of an equity calculation."""

    mean: float  # Hero share of the pot [0, 1]
    samples: int
    is_deterministic: bool
    reason: str | None = None

    @property
    def is_degenerate(self) -> bool:
        return self.reason is not None

    def __str__(self) -> str:
        kind = "exact" if self.is_deterministic else f"sims: {self.samples}"
        return f"Equity: {self.mean * 100:.1f}% ({kind})"


def _score(hero: HandResult, villain: HandResult) -> float:
    if hero > villain:
        return 1.0
    if hero == villain:
        return 0.5
    return 0.0


def _valid_pairs(
    board: Sequence[Card],
    hero_range: Mapping[Combo, float],
    villain_range: Mapping[Combo, float],
) -> tuple[list[tuple[Combo, Combo]], list[float]]:
    """Pairs of non-overlapping combos that avoid the board, with weights."""
    board_set = set(board)
    heroes = [
        (combo, w) for combo, w in hero_range.items()
        if w > 0 and not board_set.intersection(combo)
    ]
    villains = [
        (combo, w) for combo, w in villain_range.items()
        if w > 0 and not board_set.intersection(combo)
    ]

    pairs: list[tuple[Combo, Combo]] = []
    weights: list[float] = []
    for hero, hw in heroes:
        for villain, vw in villains:
            if hero[0] in villain or hero[1] in villain:
                continue
            pairs.append((hero, villain))
            weights.append(hw * vw)
    return pairs, weights


class EquityCalculator:
    """Hero equity against a weighted opponent range."""

    @staticmethod
    def range_vs_range(
        board: Sequence[Card],
        hero_range: Mapping[Combo, float],
        villain_range: Mapping[Combo, float],
        samples: int = DEFAULT_SAMPLES,
        seed: int | None = None,
        strict: bool = False,
    ) -> EquityResult:
        """Estimate the hero's share of the pot against a villain range.

        Args:
            board: Community cards already dealt (0, 3, 4 or 5 cards).
            hero_range: Hero combos mapped to weights.
            villain_range: Villain combos mapped to weights.
            samples: Total Monte Carlo run-outs when the board is incomplete,
                shared across all pairs in proportion to pair weight.
            seed: Seed for the per-call generator. Ignored on the river.
            strict: Raise instead of returning the neutral result when no
                valid pair exists.

        Returns:
            EquityResult for the hero. A neutral 0.5 result with ``reason``
            set when no valid pair survives dead-card filtering.

        Raises:
            InconsistentStreet: If the board has more than five cards.
            EquityInputsEmpty: If ``strict`` and no valid pair exists.
        """
        board = list(board)
        if len(board) > 5:
            raise InconsistentStreet(f"Board has {len(board)} cards")

        pairs, weights = _valid_pairs(board, hero_range, villain_range)
        total_weight = float(sum(weights))
        if not pairs or total_weight <= 0:
            if strict:
                raise EquityInputsEmpty("No valid hero/villain combo pair")
            logger.debug("No valid combo pairs on board %s", board)
            return EquityResult(
                mean=NEUTRAL_EQUITY,
                samples=0,
                is_deterministic=len(board) == 5,
                reason="no valid combo pairs",
            )

        if len(board) == 5:
            return EquityCalculator._river(board, pairs, weights, total_weight)
        return EquityCalculator._monte_carlo(
            board, pairs, weights, total_weight, samples, seed,
        )

    @staticmethod
    def _river(
        board: list[Card],
        pairs: list[tuple[Combo, Combo]],
        weights: list[float],
        total_weight: float,
    ) -> EquityResult:
        results: dict[Combo, HandResult] = {}

        def evaluate(combo: Combo) -> HandResult:
            if combo not in results:
                results[combo] = HandEvaluator.evaluate([*combo, *board])
            return results[combo]

        won = 0.0
        for (hero, villain), w in zip(pairs, weights):
            won += w * _score(evaluate(hero), evaluate(villain))

        mean = min(1.0, max(0.0, won / total_weight))
        return EquityResult(mean=mean, samples=len(pairs), is_deterministic=True)

    @staticmethod
    def _monte_carlo(
        board: list[Card],
        pairs: list[tuple[Combo, Combo]],
        weights: list[float],
        total_weight: float,
        samples: int,
        seed: int | None,
    ) -> EquityResult:
        samples = max(1, int(samples))
        cards_needed = 5 - len(board)
        board_set = set(board)
        rng = np.random.default_rng(seed)

        if len(pairs) == 1:
            picks = np.zeros(samples, dtype=np.int64)
        else:
            p = np.asarray(weights, dtype=np.float64) / total_weight
            picks = rng.choice(len(pairs), size=samples, p=p)

        live_by_pair: dict[int, list[Card]] = {}
        total = 0.0
        for idx in picks:
            idx = int(idx)
            hero, villain = pairs[idx]
            live = live_by_pair.get(idx)
            if live is None:
                dead = board_set | set(hero) | set(villain)
                live = [c for c in FULL_DECK if c not in dead]
                live_by_pair[idx] = live
            drawn = rng.choice(len(live), size=cards_needed, replace=False)
            runout = board + [live[i] for i in drawn]

            hero_eval = HandEvaluator.evaluate([*hero, *runout])
            villain_eval = HandEvaluator.evaluate([*villain, *runout])
            total += _score(hero_eval, villain_eval)

        mean = min(1.0, max(0.0, total / samples))
        logger.debug(
            "Monte Carlo equity %.3f over %d runouts (%d pairs)",
            mean, samples, len(pairs),
        )
        return EquityResult(mean=mean, samples=samples, is_deterministic=False)
