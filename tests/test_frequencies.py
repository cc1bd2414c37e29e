"""Tests for the base frequencies and the adjustment cascade."""

from dataclasses import replace

import pytest

from hand_ev.analysis.action_context import extract_context
from hand_ev.analysis.action_features import extract_features
from hand_ev.analysis.config import ModelConfig
from hand_ev.analysis.frequencies import (
    aggression_share,
    base_fold,
    base_raise,
    frequency_inputs,
    minimum_defense,
    multiway_adjustment,
    position_adjustment,
    range_adjustment,
    sizing_raise_frequency,
    stack_adjustment,
    stack_category,
    street_pattern,
    texture_adjustment,
)
from hand_ev.analysis.range_strength import neutral_strength, range_strength
from hand_ev.analysis.ranges import initial_range
from hand_ev.core.hand_record import HandRecord
from hand_ev.utils.card import Card
from hand_ev.utils.constants import BetSizing, Street

MODEL = ModelConfig()


def _cards(s: str) -> list[Card]:
    return [Card.from_str(c) for c in s.split()]


@pytest.fixture
def spot(flop_hand: dict):
    ctx = extract_context(HandRecord.from_dict(flop_hand), 5)
    f = extract_features(ctx)
    strength = range_strength(initial_range(ctx.dead_cards), ctx.board)
    return ctx, f, strength


class TestStreetPattern:
    def test_normalised(self, spot) -> None:
        _, f, strength = spot
        pattern = street_pattern(f, strength, MODEL)
        assert sum(pattern) == pytest.approx(1.0)
        assert all(0 <= x <= 1 for x in pattern)

    def test_preflop_is_neutral(self, spot) -> None:
        _, f, strength = spot
        preflop = replace(f, street=Street.PREFLOP)
        assert street_pattern(preflop, strength, MODEL) == MODEL.neutral_frequencies


class TestBaseFold:
    def test_within_bounds(self, spot) -> None:
        _, f, strength = spot
        lo, hi = MODEL.base_fold_bounds
        assert lo <= base_fold(f, strength, 0.5, MODEL) <= hi

    def test_bigger_bets_fold_more(self, spot) -> None:
        ctx, _, strength = spot
        small = extract_features(ctx.with_hero_amount(1))
        large = extract_features(ctx.with_hero_amount(10))
        assert base_fold(large, strength, 0.5, MODEL) > base_fold(small, strength, 0.5, MODEL)


class TestAdjustments:
    def test_range_adjustment_envelope(self, spot) -> None:
        _, f, strength = spot
        env = MODEL.range_adjustment_envelope
        assert -env <= range_adjustment(f, strength, MODEL) <= env

    def test_position_envelope(self, spot) -> None:
        ctx, f, _ = spot
        env = MODEL.position_envelope
        assert -env <= position_adjustment(ctx, f, MODEL) <= env

    def test_out_of_position_villain_folds_more(self, spot) -> None:
        ctx, f, _ = spot
        # Hero on the button: villain is out of position
        assert ctx.in_position
        ip_villain = replace(ctx, hero_label="BB", villain_label="BTN")
        assert position_adjustment(ctx, f, MODEL) > position_adjustment(ip_villain, f, MODEL)

    @pytest.mark.parametrize("spr, category", [
        (12, "deep"), (10, "deep"), (5, "medium"), (2, "short"), (0.5, "all_in"),
    ])
    def test_stack_category(self, spr: float, category: str) -> None:
        assert stack_category(spr) == category

    def test_deep_stacks_fold_less(self, spot) -> None:
        ctx, f, _ = spot
        assert stack_adjustment(ctx, f, MODEL) < 0
        short = replace(f, spr=1.5)
        assert stack_adjustment(ctx, short, MODEL) > 0

    def test_multiway_bounds(self, spot) -> None:
        ctx, f, _ = spot
        lo, hi = MODEL.multiway_bounds
        heads_up = multiway_adjustment(ctx, f, 0.0, MODEL)
        crowded = multiway_adjustment(replace(ctx, active_players=6), f, 1.0, MODEL)
        assert lo <= heads_up < crowded <= hi

    def test_texture_dry_board(self, spot) -> None:
        _, f, strength = spot
        assert strength.texture.kind == "dry"
        fold, call, rse = texture_adjustment(f, strength, MODEL)
        assert fold > 0 and call < 0 and rse > 0

    def test_no_texture_preflop(self, spot) -> None:
        _, f, _ = spot
        assert texture_adjustment(f, neutral_strength(), MODEL) == (0.0, 0.0, 0.0)


class TestRaiseFrequency:
    def test_base_raise_bounds(self, spot) -> None:
        _, f, _ = spot
        assert 0.01 <= base_raise(f) <= 0.3

    def test_no_raise_against_all_in(self, spot) -> None:
        _, f, strength = spot
        jam = replace(f, sizing=BetSizing.ALL_IN)
        assert sizing_raise_frequency(jam, strength, 0.1, MODEL) == 0.0

    def test_small_bets_induce_raises(self, spot) -> None:
        _, f, strength = spot
        small = replace(f, sizing=BetSizing.SMALL)
        large = replace(f, sizing=BetSizing.LARGE)
        assert (sizing_raise_frequency(small, strength, 0.1, MODEL)
                >= sizing_raise_frequency(large, strength, 0.1, MODEL))

    def test_minimum_defense(self, spot) -> None:
        _, f, _ = spot
        assert minimum_defense(f) == pytest.approx(3 / 8)


class TestCascade:
    def test_aggression_share(self, spot) -> None:
        ctx, _, _ = spot
        # villain called and checked: no aggression
        assert aggression_share(ctx) == 0.0

    def test_inputs_bundle(self, spot) -> None:
        ctx, f, strength = spot
        inputs = frequency_inputs(ctx, f, strength, MODEL)
        assert inputs.base_fold == base_fold(f, strength, inputs.street_pattern[0], MODEL)
        assert inputs.mdf == pytest.approx(3 / 8)
        assert inputs.aggression == 0.0
