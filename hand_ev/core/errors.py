"""Exceptions raised for malformed hand input.

These cover the input-shape tier only. Local degeneracies (empty ranges,
zero pots) are reported as result values by the analyser, and a
cancelled run is a result value too, never an exception.
"""

from __future__ import annotations


class HandEVError(Exception):
    """Base class for all hand EV analyser errors."""

    kind = "HandEVError"


class MissingHeroCards(HandEVError):
    """The hand record has no (or not exactly two) hero hole cards."""

    kind = "MissingHeroCards"


class InvalidCard(HandEVError, ValueError):
    """A card string does not match ``^[2-9TJQKA][cdhs]$``."""

    kind = "InvalidCard"

    def __init__(self, card: object, message: str | None = None) -> None:
        self.card = card
        super().__init__(message or f"Invalid card: {card!r}")


class InconsistentStreet(HandEVError):
    """Street progression is not monotone or contradicts the board."""

    kind = "InconsistentStreet"


class EquityInputsEmpty(HandEVError):
    """No valid hero/opponent combo pair survived dead-card filtering."""

    kind = "EquityInputsEmpty"


class InvalidHandRecord(HandEVError):
    """Any other structural problem with a hand document."""

    kind = "InvalidHandRecord"
