"""Tests for hero alternatives and the +EV / -EV verdict."""

import pytest

from hand_ev.analysis.action_context import extract_context
from hand_ev.analysis.comparator import (
    alternative_actions,
    classify,
    hero_label,
    rank_candidates,
)
from hand_ev.analysis.results import Candidate, Classification
from hand_ev.core.hand_record import HandRecord


def _c(label: str, ev: float) -> Candidate:
    return Candidate(label=label, amount=0.0, ev=ev)


class TestAlternatives:
    def test_flop_bet(self, flop_hand: dict) -> None:
        ctx = extract_context(HandRecord.from_dict(flop_hand), 5)
        assert hero_label(ctx) == "bet"
        assert alternative_actions(ctx, (0.33, 0.66, 1.0)) == [
            ("check", 0.0),
            ("bet_33", 1.65),
            ("bet_66", 3.3),
            ("bet_100", 5.0),
            ("all_in", 97.5),
        ]

    def test_skips_hero_amount(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"][5]["amount"] = 5
        ctx = extract_context(HandRecord.from_dict(flop_hand), 5)
        labels = [label for label, _ in alternative_actions(ctx, (0.33, 0.66, 1.0))]
        assert "bet_100" not in labels

    def test_skips_oversized(self, flop_hand: dict) -> None:
        ctx = extract_context(HandRecord.from_dict(flop_hand), 5)
        labels = [label for label, _ in alternative_actions(ctx, (50.0,), include_all_in=False)]
        assert labels == ["check"]

    def test_no_all_in(self, flop_hand: dict) -> None:
        ctx = extract_context(HandRecord.from_dict(flop_hand), 5)
        out = alternative_actions(ctx, (), include_all_in=False)
        assert out == [("check", 0.0)]


class TestClassify:
    def test_tie_is_positive(self) -> None:
        bet, check, fold = _c("bet", 1.0), _c("check", 1.0), _c("fold", -0.1)
        result = classify(bet, [bet, check, fold])
        assert result.best == bet
        assert result.ties == (check,)
        assert result.delta == 0.0
        assert result.classification == Classification.POSITIVE

    def test_worse_choice_is_negative(self) -> None:
        bet, check = _c("bet", 0.5), _c("check", 1.25)
        result = classify(bet, [bet, check])
        assert result.best == check
        assert result.delta == pytest.approx(0.75)
        assert result.classification == Classification.NEGATIVE

    def test_threshold(self) -> None:
        bet, check = _c("bet", 0.5), _c("check", 0.6)
        assert classify(bet, [bet, check], threshold=0.2).classification == Classification.POSITIVE
        assert classify(bet, [bet, check]).classification == Classification.NEGATIVE

    def test_ties_compared_at_three_decimals(self) -> None:
        bet, check = _c("bet", 1.0001), _c("check", 1.0)
        result = classify(check, [bet, check])
        assert result.ties == (check,)
        assert result.classification == Classification.POSITIVE


class TestRanking:
    def test_stable_for_equal_evs(self) -> None:
        a, b, c = _c("a", 2.0), _c("b", 2.0), _c("c", 3.0)
        assert [x.label for x in rank_candidates([a, b, c])] == ["c", "a", "b"]
        assert [x.label for x in rank_candidates([b, a, c])] == ["c", "b", "a"]

    def test_descending(self) -> None:
        evs = [0.1, -2.0, 5.5, 3.0]
        ranked = rank_candidates([_c(str(i), ev) for i, ev in enumerate(evs)])
        assert [x.ev for x in ranked] == sorted(evs, reverse=True)
