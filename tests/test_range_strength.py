"""Tests for board texture and range strength profiles."""

import pytest

from hand_ev.analysis.range_strength import (
    board_texture,
    combo_strength,
    neutral_strength,
    range_strength,
)
from hand_ev.analysis.ranges import initial_range, preflop_weight
from hand_ev.utils.card import Card, make_combo
from hand_ev.utils.constants import BoardTextureKind


def _cards(s: str) -> list[Card]:
    return [Card.from_str(c) for c in s.split()]


def _combo(s: str):
    return make_combo(*_cards(s))


class TestBoardTexture:
    @pytest.mark.parametrize("board, kind", [
        ("7h 7s 7c", BoardTextureKind.TRIPS),
        ("Kh Ks 2c", BoardTextureKind.PAIRED),
        ("Ah 9h 2h", BoardTextureKind.SUITED),
        ("9c 8d 7h", BoardTextureKind.CONNECTED),
        ("Kc Qd 5h", BoardTextureKind.SEMI_CONNECTED),
        ("Kc 7d 2h", BoardTextureKind.DRY),
        ("", BoardTextureKind.NONE),
    ])
    def test_kinds(self, board: str, kind: BoardTextureKind) -> None:
        assert board_texture(_cards(board)).kind == kind

    def test_paired_wins_over_suited(self) -> None:
        assert board_texture(_cards("Kh Ks 2h 5h")).kind == BoardTextureKind.PAIRED

    def test_wet_and_dry(self) -> None:
        assert board_texture(_cards("Ah 9h 2h")).is_wet
        assert board_texture(_cards("Kc 7d 2h")).is_dry
        assert not board_texture(_cards("Kh Ks 2c")).is_wet


class TestComboStrength:
    def test_set_on_flop(self) -> None:
        strength, drawing = combo_strength(_combo("7c 7d"), _cards("7h Ks 2c"))
        assert strength == pytest.approx(0.80)
        assert not drawing

    def test_draw_bonus(self) -> None:
        strength, drawing = combo_strength(_combo("9h 8h"), _cards("7h 6c 2h"))
        assert strength == pytest.approx(0.20 + 0.15)
        assert drawing

    def test_preflop_uses_preflop_weight(self) -> None:
        combo = _combo("Ah Kh")
        assert combo_strength(combo, [])[0] == preflop_weight(combo)


class TestRangeStrength:
    def test_single_set(self) -> None:
        board = _cards("7h Ks 2c")
        profile = range_strength({_combo("7c 7d"): 1.0}, board)
        assert profile.average == pytest.approx(0.80)
        assert profile.strong == pytest.approx(1.0)
        assert profile.weak == 0.0
        assert profile.label == "strong"
        assert profile.combos == 1

    def test_polarised_range(self) -> None:
        board = _cards("7h Ks 2c")
        rng = {_combo("7c 7d"): 1.0, _combo("4d 3h"): 1.0}
        profile = range_strength(rng, board)
        assert profile.strong == pytest.approx(0.5)
        assert profile.weak == pytest.approx(0.5)
        assert profile.medium == pytest.approx(0.0)
        assert profile.polarization == pytest.approx(1.0)

    def test_shares_in_unit_interval(self) -> None:
        board = _cards("Kh 7s 2c")
        profile = range_strength(initial_range(board), board)
        for share in (profile.average, profile.strong, profile.medium, profile.weak,
                      profile.drawing, profile.top_share, profile.bottom_share):
            assert 0.0 <= share <= 1.0 + 1e-9
        assert profile.texture.kind == BoardTextureKind.DRY

    def test_empty_range_is_neutral(self) -> None:
        board = _cards("Kh 7s 2c")
        profile = range_strength({}, board)
        assert profile == neutral_strength(board)
        assert profile.average == 0.5
        assert profile.label == "medium"
