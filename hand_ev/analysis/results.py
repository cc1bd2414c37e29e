"""Typed values flowing through and out of the analyser.

A run ends in exactly one of three outcomes:

* ``Ok``: the analysis record, plus any local degeneracies met on the way;
* ``InputError``: the hand record was malformed (nothing is attached);
* ``Cancelled``: the deadline fired; ``stage`` is the last completed stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union


class Stage(StrEnum):
    """Pipeline stages in execution order."""

    NONE = "none"
    CONTEXT = "context"
    FEATURES = "features"
    RANGE_STRENGTH = "range_strength"
    FREQUENCIES = "frequencies"
    RESPONSE = "response"
    RANGES = "ranges"
    EQUITY = "equity"
    BRANCH_EV = "branch_ev"
    ALTERNATIVES = "alternatives"
    CLASSIFICATION = "classification"


class Classification(StrEnum):
    POSITIVE = "+EV"
    NEGATIVE = "-EV"


def r3(x: float) -> float:
    """Round to the three decimals used in every reported number."""
    return round(float(x), 3)


@dataclass(frozen=True)
class Frequencies:
    """Opponent response probabilities."""

    fold: float
    call: float
    raise_: float

    @property
    def total(self) -> float:
        return self.fold + self.call + self.raise_

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.fold, self.call, self.raise_)

    def to_dict(self) -> dict[str, float]:
        return {"fold": r3(self.fold), "call": r3(self.call), "raise": r3(self.raise_)}


@dataclass(frozen=True)
class ValidationTrace:
    """Which clamps and corrections fired while normalising a triple."""

    was_adjusted: bool = False
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class FrequencyBand:
    """Plausible interval around one response frequency."""

    value: float
    low: float
    high: float
    uncertainty: float

    @property
    def mid(self) -> float:
        return (self.low + self.high) / 2

    def to_dict(self) -> dict[str, float]:
        return {
            "min": r3(self.low),
            "max": r3(self.high),
            "mid": r3(self.mid),
            "uncertainty": r3(self.uncertainty),
        }


@dataclass(frozen=True)
class FrequencyBands:
    fold: FrequencyBand
    call: FrequencyBand
    raise_: FrequencyBand
    level: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "fold": self.fold.to_dict(),
            "call": self.call.to_dict(),
            "raise": self.raise_.to_dict(),
            "level": self.level,
        }


@dataclass(frozen=True)
class LocalDegeneracy:
    """A stage fell back to its neutral default. Not an error."""

    stage: Stage
    reason: str


@dataclass(frozen=True)
class BranchEVs:
    """Per-branch EVs with the inputs used, kept for audit."""

    fold: float
    call: float
    raise_: float
    pot: float
    bet: float
    raise_size: float
    equity_vs_call: float
    equity_vs_raise: float
    rake_percent: float
    rake_cap: float | None

    def to_dict(self) -> dict[str, float]:
        return {"fold": r3(self.fold), "call": r3(self.call), "raise": r3(self.raise_)}


@dataclass(frozen=True)
class Candidate:
    """One hero option at the decision node."""

    label: str
    amount: float
    ev: float

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "ev": r3(self.ev)}


@dataclass(frozen=True)
class EVAnalysis:
    """The analysis record attached to a betting action as ``evAnalysis``.

    Only the fields in ``to_dict`` are stored. The rest describe how the
    response model and the raise branch got their numbers; they are left
    out of equality and available through ``audit_dict``.
    """

    response_frequencies: Frequencies
    gto_frequencies: Frequencies | None
    equity_vs_call: float
    equity_vs_raise: float
    branch_evs: BranchEVs
    total_ev: float
    best_alternative: Candidate
    classification: Classification
    delta: float
    ties: tuple[Candidate, ...] = ()
    candidates: tuple[Candidate, ...] = field(default=(), compare=False)
    assembled_frequencies: Frequencies | None = field(default=None, compare=False)
    trace: ValidationTrace = field(default_factory=ValidationTrace, compare=False)
    profile: str = field(default="", compare=False)
    confidence: float = field(default=0.0, compare=False)
    nash_confidence: float = field(default=0.0, compare=False)
    frequency_bands: FrequencyBands | None = field(default=None, compare=False)
    minimum_defense: float = field(default=0.0, compare=False)
    raise_sizes: dict[str, float] = field(default_factory=dict, compare=False)
    raise_weights: dict[str, float] = field(default_factory=dict, compare=False)
    remaining_streets: int = field(default=0, compare=False)
    implied_odds: float = field(default=1.0, compare=False)
    reverse_implied_odds: float = field(default=1.0, compare=False)
    action_tags: tuple[str, ...] = field(default=(), compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the stored document shape, numbers to 3 decimals."""
        return {
            "responseFrequencies": self.response_frequencies.to_dict(),
            "gtoFrequencies": (
                self.gto_frequencies.to_dict() if self.gto_frequencies else None
            ),
            "equityVsCall": r3(self.equity_vs_call),
            "equityVsRaise": r3(self.equity_vs_raise),
            "branchEVs": self.branch_evs.to_dict(),
            "totalEV": r3(self.total_ev),
            "bestAlternative": self.best_alternative.to_dict(),
            "classification": self.classification.value,
            "delta": r3(self.delta),
        }

    def audit_dict(self) -> dict[str, Any]:
        """How the numbers in ``to_dict`` were reached."""
        return {
            "assembledFrequencies": (
                self.assembled_frequencies.to_dict() if self.assembled_frequencies else None
            ),
            "validation": {
                "wasAdjusted": self.trace.was_adjusted,
                "reasons": list(self.trace.reasons),
            },
            "profile": self.profile,
            "confidence": r3(self.confidence),
            "nashConfidence": r3(self.nash_confidence),
            "frequencyBands": (
                self.frequency_bands.to_dict() if self.frequency_bands else None
            ),
            "minimumDefense": r3(self.minimum_defense),
            "raiseSize": r3(self.branch_evs.raise_size),
            "raiseSizes": {k: r3(v) for k, v in self.raise_sizes.items()},
            "raiseWeights": {k: r3(v) for k, v in self.raise_weights.items()},
            "remainingStreets": self.remaining_streets,
            "impliedOdds": r3(self.implied_odds),
            "reverseImpliedOdds": r3(self.reverse_implied_odds),
            "actionTags": list(self.action_tags),
            "candidates": [c.to_dict() for c in self.candidates],
        }


@dataclass(frozen=True)
class Ok:
    hand_id: str
    action_index: int
    analysis: EVAnalysis
    degeneracies: tuple[LocalDegeneracy, ...] = ()


@dataclass(frozen=True)
class InputError:
    kind: str
    message: str


@dataclass(frozen=True)
class Cancelled:
    stage: Stage


AnalysisOutcome = Union[Ok, InputError, Cancelled]
