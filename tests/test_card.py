"""Tests for card parsing and combos."""

import pytest

from hand_ev.core.errors import InvalidCard
from hand_ev.utils.card import (
    FULL_DECK,
    Card,
    all_combos,
    combo_str,
    make_combo,
    parse_cards,
)
from hand_ev.utils.constants import Rank, Suit


class TestCardParsing:
    def test_from_str(self) -> None:
        card = Card.from_str("Th")
        assert card.rank == Rank.TEN
        assert card.suit == Suit.HEARTS
        assert card.value == 10

    def test_str_round_trip(self) -> None:
        assert str(Card.from_str("Ad")) == "Ad"

    @pytest.mark.parametrize("bad", ["", "A", "1h", "Ax", "ah", "AH", "10h", "Ahh"])
    def test_invalid_strings_raise(self, bad: str) -> None:
        with pytest.raises(InvalidCard) as exc:
            Card.from_str(bad)
        assert exc.value.card == bad

    def test_invalid_card_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Card.from_str("Zz")

    def test_non_string_raises(self) -> None:
        with pytest.raises(InvalidCard):
            Card.from_str(None)  # type: ignore[arg-type]

    def test_parse_cards_stops_on_first_bad(self) -> None:
        with pytest.raises(InvalidCard) as exc:
            parse_cards(["Ah", "Kx", "Qq"])
        assert exc.value.card == "Kx"


class TestOrdering:
    def test_ordered_by_value(self) -> None:
        assert Card.from_str("2c") < Card.from_str("Ac")
        assert Card.from_str("Kd") > Card.from_str("Qs")

    def test_equal_cards_hash_alike(self) -> None:
        assert len({Card.from_str("Ah"), Card.from_str("Ah")}) == 1


class TestDeckAndCombos:
    def test_full_deck_has_52_distinct_cards(self) -> None:
        assert len(FULL_DECK) == 52
        assert len(set(FULL_DECK)) == 52

    def test_make_combo_is_canonical(self) -> None:
        a, k = Card.from_str("Ah"), Card.from_str("Kd")
        assert make_combo(a, k) == make_combo(k, a) == (a, k)
        assert combo_str(make_combo(k, a)) == "AhKd"

    def test_all_combos_count(self) -> None:
        assert len(all_combos()) == 1326

    def test_all_combos_respects_dead_cards(self) -> None:
        dead = parse_cards(["Ah", "Kd"])
        combos = all_combos(dead)
        assert len(combos) == 1225  # C(50, 2)
        assert not any(set(dead) & set(c) for c in combos)
