"""Tests for hand document validation and the immutable hand record."""

import pytest

from hand_ev.core.errors import (
    HandEVError,
    InconsistentStreet,
    InvalidCard,
    InvalidHandRecord,
    MissingHeroCards,
)
from hand_ev.core.hand_record import HandRecord
from hand_ev.utils.card import Card
from hand_ev.utils.constants import ActionKind, GameType, Street


def _cards(s: str) -> list[Card]:
    return [Card.from_str(c) for c in s.split()]


class TestFromDict:
    def test_valid_hand(self, flop_hand: dict) -> None:
        record = HandRecord.from_dict(flop_hand)
        assert record.id == "h1"
        assert record.hero_hole_cards == tuple(_cards("Ks Kd"))
        assert record.community.cards() == _cards("Ah 7c 2d")
        assert len(record.actions) == 7
        assert record.game_type == GameType.CASH

    def test_actions_sorted_by_order(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"].reverse()
        record = HandRecord.from_dict(flop_hand)
        assert [a.order for a in record.actions] == list(range(7))
        # index still points at the slot in the document
        assert record.actions[0].index == 6

    def test_order_defaults_to_position(self, flop_hand: dict) -> None:
        for a in flop_hand["bettingActions"]:
            del a["order"]
        record = HandRecord.from_dict(flop_hand)
        assert [a.order for a in record.actions] == list(range(7))

    def test_post_is_accepted(self, flop_hand: dict) -> None:
        record = HandRecord.from_dict(flop_hand)
        assert record.actions[0].kind == ActionKind.POST


class TestValidation:
    def test_missing_hero_cards(self, flop_hand: dict) -> None:
        del flop_hand["heroHoleCards"]
        with pytest.raises(MissingHeroCards):
            HandRecord.from_dict(flop_hand)

    def test_one_hero_card(self, flop_hand: dict) -> None:
        flop_hand["heroHoleCards"] = ["Ks"]
        with pytest.raises(MissingHeroCards):
            HandRecord.from_dict(flop_hand)

    def test_invalid_card_keeps_string(self, flop_hand: dict) -> None:
        flop_hand["communityCards"]["flop"] = ["Ah", "7c", "1d"]
        with pytest.raises(InvalidCard) as exc:
            HandRecord.from_dict(flop_hand)
        assert exc.value.card == "1d"

    def test_duplicate_card(self, flop_hand: dict) -> None:
        flop_hand["communityCards"]["flop"] = ["Ks", "7c", "2d"]
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_flop_cards_distinct(self, flop_hand: dict) -> None:
        flop_hand["communityCards"]["flop"] = ["Ah", "Ah", "2d"]
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_short_flop(self, flop_hand: dict) -> None:
        flop_hand["communityCards"]["flop"] = ["Ah", "7c"]
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_river_without_turn(self, flop_hand: dict) -> None:
        flop_hand["communityCards"]["river"] = "9s"
        with pytest.raises(InconsistentStreet):
            HandRecord.from_dict(flop_hand)

    def test_turn_without_flop(self, flop_hand: dict) -> None:
        flop_hand["communityCards"] = {"turn": "9s"}
        with pytest.raises(InconsistentStreet):
            HandRecord.from_dict(flop_hand)

    def test_streets_going_backwards(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"][6]["street"] = "preflop"
        with pytest.raises(InconsistentStreet):
            HandRecord.from_dict(flop_hand)

    def test_unknown_action_kind(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"][5]["action"] = "shove"
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_negative_amount(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"][5]["amount"] = -3
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_seat_out_of_range(self, flop_hand: dict) -> None:
        flop_hand["buttonPosition"] = 9
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_unknown_game_type(self, flop_hand: dict) -> None:
        flop_hand["gameType"] = "sit_and_go"
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand)

    def test_all_errors_share_a_base(self, flop_hand: dict) -> None:
        flop_hand["heroHoleCards"] = []
        with pytest.raises(HandEVError) as exc:
            HandRecord.from_dict(flop_hand)
        assert exc.value.kind == "MissingHeroCards"


class TestQueries:
    def test_hero_id_from_seat(self, flop_hand: dict) -> None:
        assert HandRecord.from_dict(flop_hand).hero_id == "hero"

    def test_hero_id_falls_back_to_username(self, flop_hand: dict) -> None:
        flop_hand["heroPosition"] = 5
        assert HandRecord.from_dict(flop_hand).hero_id == "alice"

    def test_hero_decisions(self, flop_hand: dict) -> None:
        assert HandRecord.from_dict(flop_hand).hero_decisions() == [2, 5]

    def test_action_at(self, flop_hand: dict) -> None:
        action = HandRecord.from_dict(flop_hand).action_at(5)
        assert action.kind == ActionKind.BET
        assert action.amount == 3.0

    def test_action_at_unknown_index(self, flop_hand: dict) -> None:
        with pytest.raises(InvalidHandRecord):
            HandRecord.from_dict(flop_hand).action_at(42)

    def test_visible_board(self, river_hand: dict) -> None:
        community = HandRecord.from_dict(river_hand).community
        assert community.visible_on(Street.PREFLOP) == []
        assert community.visible_on(Street.FLOP) == _cards("As Kh Qc")
        assert community.visible_on(Street.TURN) == _cards("As Kh Qc 2d")
        assert community.visible_on(Street.RIVER) == _cards("As Kh Qc 2d 3h")


class TestToDict:
    def test_round_trip(self, river_hand: dict) -> None:
        record = HandRecord.from_dict(river_hand)
        assert HandRecord.from_dict(record.to_dict()) == record

    def test_keeps_document_order_and_analysis(self, flop_hand: dict) -> None:
        flop_hand["bettingActions"][5]["evAnalysis"] = {"totalEV": 1.0}
        out = HandRecord.from_dict(flop_hand).to_dict()
        assert out["bettingActions"][5]["evAnalysis"] == {"totalEV": 1.0}
        assert out["communityCards"] == {"flop": ["Ah", "7c", "2d"], "turn": None, "river": None}
