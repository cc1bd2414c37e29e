"""Tests for the villain raise-size catalogue."""

import pytest

from hand_ev.analysis.raise_sizing import raise_sizes, raise_sizing, size_weights


class TestRaiseSizing:
    def test_deep_stacks(self) -> None:
        sizing = raise_sizing(bet=3, pot=5, effective_stack=97.5, spr=19.5)
        assert sizing.sizes == {"small": 9.0, "medium": 12.0, "large": 12.0, "all_in": 94.5}
        assert sizing.expected == pytest.approx(15.225)

    def test_short_stacks_clip_to_stack_behind(self) -> None:
        sizing = raise_sizing(bet=10, pot=20, effective_stack=20, spr=1.0)
        assert set(sizing.sizes.values()) == {10.0}
        assert sizing.expected == pytest.approx(10.0)

    def test_jam_as_large_at_low_spr(self) -> None:
        assert raise_sizes(5, 20, 40, spr=2.0)["large"] == 35

    @pytest.mark.parametrize("spr", [0.5, 2.0, 3.5, 6.0, 20.0])
    def test_weights_sum_to_one(self, spr: float) -> None:
        assert sum(size_weights(spr).values()) == pytest.approx(1.0)

    def test_no_stack_no_raise(self) -> None:
        assert raise_sizing(bet=3, pot=5, effective_stack=0, spr=0).expected == 0.0

    def test_all_in_bet_leaves_no_raise(self) -> None:
        sizing = raise_sizing(bet=97.5, pot=5, effective_stack=97.5, spr=19.5)
        assert sizing.expected == 0.0
        assert all(amount == 0.0 for amount in sizing.sizes.values())

    def test_raise_never_exceeds_stack_behind(self) -> None:
        sizing = raise_sizing(bet=40, pot=10, effective_stack=50, spr=5.0)
        assert max(sizing.sizes.values()) == 10.0
