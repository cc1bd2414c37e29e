"""Texas Hold'em hand evaluation and made-hand categorisation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from hand_ev.utils.card import Card
from hand_ev.utils.constants import DrawType, HandRanking, StrengthCategory


@dataclass(frozen=True, order=True)
class HandResult:
    """Result of evaluating a poker hand.

    Instances compare by ranking first, then by the tie-break values
    (rank values, most significant first), so ``a > b`` means a wins.
    """

    ranking: HandRanking
    values: tuple[int, ...]


def _straight_high(values: set[int]) -> int | None:
    """Return the high card of the best straight in a set of rank values."""
    if 14 in values:
        values = values | {1}
    for high in range(14, 4, -1):
        if all(v in values for v in range(high - 4, high + 1)):
            return high
    return None


class HandEvaluator:
    """Evaluates 5 to 7 card poker hands in a single pass."""

    @staticmethod
    def evaluate(cards: Sequence[Card]) -> HandResult:
        """Evaluate the best 5-card hand from a list of cards.

        Args:
            cards: 5 to 7 cards (hole cards + community cards).

        Returns:
            HandResult with the hand ranking and tie-break values.

        Raises:
            ValueError: If fewer than 5 cards are provided.
        """
        if len(cards) < 5:
            raise ValueError(f"Need at least 5 cards, got {len(cards)}")

        by_suit: dict[str, list[int]] = {}
        for c in cards:
            by_suit.setdefault(c.suit, []).append(c.value)
        flush_values = next(
            (sorted(v, reverse=True) for v in by_suit.values() if len(v) >= 5),
            None,
        )

        if flush_values is not None:
            sf_high = _straight_high(set(flush_values))
            if sf_high is not None:
                return HandResult(HandRanking.STRAIGHT_FLUSH, (sf_high,))

        counts = Counter(c.value for c in cards)
        # Groups ordered by size, then by rank value
        groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
        ordered = sorted(counts, reverse=True)

        top_value, top_count = groups[0]
        if top_count == 4:
            kicker = max(v for v in ordered if v != top_value)
            return HandResult(HandRanking.FOUR_OF_A_KIND, (top_value, kicker))

        if top_count == 3:
            pair_values = [v for v, n in groups[1:] if n >= 2]
            if pair_values:
                return HandResult(
                    HandRanking.FULL_HOUSE, (top_value, max(pair_values))
                )

        if flush_values is not None:
            return HandResult(HandRanking.FLUSH, tuple(flush_values[:5]))

        straight = _straight_high(set(ordered))
        if straight is not None:
            return HandResult(HandRanking.STRAIGHT, (straight,))

        if top_count == 3:
            kickers = [v for v in ordered if v != top_value][:2]
            return HandResult(HandRanking.THREE_OF_A_KIND, (top_value, *kickers))

        pairs = [v for v, n in groups if n == 2]
        if len(pairs) >= 2:
            high, low = pairs[0], pairs[1]
            kicker = max(v for v in ordered if v not in (high, low))
            return HandResult(HandRanking.TWO_PAIR, (high, low, kicker))

        if pairs:
            kickers = [v for v in ordered if v != pairs[0]][:3]
            return HandResult(HandRanking.ONE_PAIR, (pairs[0], *kickers))

        return HandResult(HandRanking.HIGH_CARD, tuple(ordered[:5]))


def categorize_hand(hole: Sequence[Card], board: Sequence[Card]) -> StrengthCategory:
    """Classify a two-card holding on a board into a made-hand category.

    Boards with fewer than three cards have no made hand and return AIR;
    preflop strength is handled by the range weights instead.
    """
    if len(hole) != 2 or len(board) < 3:
        return StrengthCategory.AIR

    result = HandEvaluator.evaluate([*hole, *board])
    hole_values = {c.value for c in hole}
    board_values = sorted((c.value for c in board), reverse=True)
    ranking = result.ranking

    if ranking == HandRanking.STRAIGHT_FLUSH:
        return StrengthCategory.STRAIGHT_FLUSH
    if ranking == HandRanking.FOUR_OF_A_KIND:
        return StrengthCategory.QUADS
    if ranking == HandRanking.FULL_HOUSE:
        return StrengthCategory.FULL_HOUSE
    if ranking == HandRanking.FLUSH:
        return StrengthCategory.FLUSH
    if ranking == HandRanking.STRAIGHT:
        return StrengthCategory.STRAIGHT
    if ranking == HandRanking.THREE_OF_A_KIND:
        trips = result.values[0]
        if hole[0].value == hole[1].value == trips:
            return StrengthCategory.SET
        if trips in hole_values:
            return StrengthCategory.TRIPS
        return StrengthCategory.PAIR_BOARD
    if ranking == HandRanking.TWO_PAIR:
        if hole_values & set(result.values[:2]):
            return StrengthCategory.TWO_PAIR
        return StrengthCategory.PAIR_BOARD
    if ranking == HandRanking.ONE_PAIR:
        pair = result.values[0]
        if pair not in hole_values:
            return StrengthCategory.PAIR_BOARD
        if pair > board_values[0]:
            return StrengthCategory.OVERPAIR
        if pair == board_values[0]:
            return StrengthCategory.TOP_PAIR
        distinct = sorted(set(board_values), reverse=True)
        if len(distinct) > 1 and pair == distinct[1]:
            return StrengthCategory.SECOND_PAIR
        return StrengthCategory.PAIR
    return StrengthCategory.AIR


def draw_types(hole: Sequence[Card], board: Sequence[Card]) -> list[DrawType]:
    """Detect flush and straight draws for a holding on a flop or turn.

    A flush draw is exactly four cards of one suit. A straight draw is
    open-ended when two or more ranks complete it and a gutshot when only
    one does. A flush draw with a straight draw is reported as a single
    combo draw. River boards and boards shorter than a flop have no draws.
    """
    if len(board) < 3 or len(board) >= 5:
        return []

    cards = [*hole, *board]
    suit_counts = Counter(c.suit for c in cards)
    flush_draw = any(n == 4 for n in suit_counts.values())

    values = {c.value for c in cards}
    oesd = gutshot = False
    if _straight_high(values) is None:
        # Ranks that would complete a straight: two or more is open-ended
        # (or a double gutter), exactly one is a gutshot.
        outs = [
            v for v in range(2, 15)
            if v not in values and _straight_high(values | {v}) is not None
        ]
        oesd = len(outs) >= 2
        gutshot = len(outs) == 1

    if flush_draw and (oesd or gutshot):
        return [DrawType.COMBO]
    draws = []
    if flush_draw:
        draws.append(DrawType.FLUSH)
    if oesd:
        draws.append(DrawType.OESD)
    elif gutshot:
        draws.append(DrawType.GUTSHOT)
    return draws
