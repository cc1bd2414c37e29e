"""Card parsing and the static 52-card deck."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Iterable

from hand_ev.core.errors import InvalidCard
from hand_ev.utils.constants import RANK_VALUES, Rank, Suit

CARD_PATTERN = re.compile(r"^[2-9TJQKA][cdhs]$")


@total_ordering
@dataclass(frozen=True)
class Card:
    """A single playing card, ordered by rank value."""

    rank: Rank
    suit: Suit

    @classmethod
    def from_str(cls, s: str) -> Card:
        """Create a Card from a 2-character string like 'Ah' or 'Td'.

        Args:
            s: Rank character followed by a lowercase suit character.

        Returns:
            A new Card instance.

        Raises:
            InvalidCard: If the string does not match ``^[2-9TJQKA][cdhs]$``.
        """
        if not isinstance(s, str) or not CARD_PATTERN.match(s):
            raise InvalidCard(s)
        return cls(rank=Rank(s[0]), suit=Suit(s[1]))

    @property
    def value(self) -> int:
        """Numeric value of the card's rank (2-14)."""
        return RANK_VALUES[self.rank]

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.value}"

    def __repr__(self) -> str:
        return f"Card('{self}')"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return (self.value, self.suit.value) < (other.value, other.suit.value)


# Combos are unordered pairs; we store them with the higher card first.
Combo = tuple[Card, Card]

FULL_DECK: tuple[Card, ...] = tuple(
    Card(rank=rank, suit=suit) for rank in Rank for suit in Suit
)


def parse_cards(cards: Iterable[str]) -> list[Card]:
    """Parse a sequence of card strings, raising InvalidCard on the first bad one."""
    return [Card.from_str(c) for c in cards]


def make_combo(a: Card, b: Card) -> Combo:
    """Return the canonical (high, low) ordering of a two-card combo."""
    return (a, b) if b < a else (b, a)


def combo_str(combo: Combo) -> str:
    return f"{combo[0]}{combo[1]}"


def all_combos(dead: Iterable[Card] = ()) -> list[Combo]:
    """All two-card combos that avoid the dead cards (1326 with none dead)."""
    dead_set = set(dead)
    live = [c for c in FULL_DECK if c not in dead_set]
    return [
        make_combo(live[i], live[j])
        for i in range(len(live))
        for j in range(i + 1, len(live))
    ]
