"""Tests for the range-versus-range equity calculator."""

import pytest

from hand_ev.core.equity_calculator import EquityCalculator, EquityResult
from hand_ev.core.errors import EquityInputsEmpty, InconsistentStreet
from hand_ev.utils.card import Card, make_combo


def _cards(s: str) -> list[Card]:
    return [Card.from_str(c) for c in s.split()]


def _combo(s: str) -> dict:
    """Single-combo range with weight 1."""
    a, b = _cards(s)
    return {make_combo(a, b): 1.0}


class TestRiver:
    def test_hero_crushed(self) -> None:
        result = EquityCalculator.range_vs_range(
            _cards("As Kh Qc 2d 3h"), _combo("Td 9d"), _combo("Ad Ac"),
        )
        assert result.mean == 0.0
        assert result.is_deterministic

    def test_mirror_on_quads_splits(self) -> None:
        result = EquityCalculator.range_vs_range(
            _cards("2s 2h 2d 2c 5s"), _combo("As Ks"), _combo("Ah Kh"),
        )
        assert result.mean == 0.5

    def test_seed_independent(self) -> None:
        board = _cards("Ac 7d 2s 8c 3h")
        villain = {**_combo("Qs Qd"), **_combo("Ad Kd")}
        a = EquityCalculator.range_vs_range(board, _combo("Ah Kh"), villain, seed=1)
        b = EquityCalculator.range_vs_range(board, _combo("Ah Kh"), villain, seed=2)
        assert a == b

    def test_weighted_pairs(self) -> None:
        # Hero beats QQ (weight 3) and chops with AdKd (weight 1)
        board = _cards("Ac 7d 2s 8c 3h")
        villain = {
            make_combo(*_cards("Qs Qd")): 3.0,
            make_combo(*_cards("Ad Kd")): 1.0,
        }
        result = EquityCalculator.range_vs_range(board, _combo("Ah Kh"), villain)
        assert result.mean == pytest.approx((3 * 1.0 + 1 * 0.5) / 4)

    def test_blocked_combos_are_skipped(self) -> None:
        board = _cards("Ac 7d 2s 8c 3h")
        villain = {**_combo("Qs Qd"), **_combo("Ah Qh")}  # Ah is the hero's card
        result = EquityCalculator.range_vs_range(board, _combo("Ah Kh"), villain)
        assert result.mean == 1.0
        assert result.samples == 1


class TestMonteCarlo:
    def test_aa_vs_kk_preflop(self) -> None:
        result = EquityCalculator.range_vs_range(
            [], _combo("Ah As"), _combo("Kh Ks"), samples=2_000, seed=1,
        )
        # AA vs KK is ~82% equity
        assert 0.75 < result.mean < 0.90
        assert not result.is_deterministic
        assert result.samples == 2_000

    def test_budget_is_shared_across_pairs(self) -> None:
        villain = {
            **_combo("Kh Ks"), **_combo("Qh Jh"), **_combo("7c 2d"),
            **_combo("8s 8d"), **_combo("Ac Qd"),
        }
        result = EquityCalculator.range_vs_range(
            _cards("Th 9s 2c"), _combo("Ah As"), villain, samples=150, seed=2,
        )
        assert result.samples == 150

    def test_same_seed_same_result(self) -> None:
        villain = {**_combo("Kh Ks"), **_combo("Qh Jh"), **_combo("7c 2d")}
        a = EquityCalculator.range_vs_range(
            _cards("Th 9s 2c"), _combo("Ah As"), villain, samples=300, seed=42,
        )
        b = EquityCalculator.range_vs_range(
            _cards("Th 9s 2c"), _combo("Ah As"), villain, samples=300, seed=42,
        )
        assert a == b

    @pytest.mark.parametrize("board", ["", "Th 9s 2c", "Th 9s 2c 4d"])
    def test_equity_in_unit_interval(self, board: str) -> None:
        result = EquityCalculator.range_vs_range(
            _cards(board), _combo("7h 6h"), _combo("Ac Kc"), samples=200, seed=3,
        )
        assert 0.0 <= result.mean <= 1.0

    def test_drawing_dead_on_turn(self) -> None:
        # Quads against a hand with no outs
        result = EquityCalculator.range_vs_range(
            _cards("9s 9h 9d 2c"), _combo("9c 3h"), _combo("4d 5d"),
            samples=200, seed=5,
        )
        assert result.mean == 1.0


class TestDegenerateInputs:
    def test_empty_range_is_neutral(self) -> None:
        result = EquityCalculator.range_vs_range(
            _cards("Ac 7d 2s"), _combo("Ah Kh"), {},
        )
        assert result.mean == 0.5
        assert result.is_degenerate
        assert result.reason

    def test_fully_blocked_range_is_neutral(self) -> None:
        result = EquityCalculator.range_vs_range(
            _cards("Ac 7d 2s"), _combo("Ah Kh"), _combo("Ah Qd"),
        )
        assert result == EquityResult(
            mean=0.5, samples=0, is_deterministic=False, reason="no valid combo pairs",
        )

    def test_strict_raises(self) -> None:
        with pytest.raises(EquityInputsEmpty):
            EquityCalculator.range_vs_range(
                _cards("Ac 7d 2s"), _combo("Ah Kh"), {}, strict=True,
            )

    def test_oversized_board(self) -> None:
        with pytest.raises(InconsistentStreet):
            EquityCalculator.range_vs_range(
                _cards("Ac 7d 2s 3h 4h 5h"), _combo("Ah Kh"), _combo("Qs Qd"),
            )
