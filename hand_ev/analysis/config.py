"""Analyser configuration: rake, model coefficients and run settings.

All heuristic coefficients of the opponent response model live in
``ModelConfig`` so they can be tuned from a JSON file instead of code.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger("hand_ev.analysis.config")

DEFAULT_CONFIG_PATH = Path.home() / ".hand_ev" / "config.json"

Triple = tuple[float, float, float]


# ---------------------------------------------------------------------------
# Rake
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RakeConfig:
    """House rake: ``min(percent * pot, cap)`` taken from a won pot."""

    percent: float = 0.0
    cap: float | None = None
    no_flop_no_drop: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.percent <= 1.0:
            raise ValueError(f"Rake percent must be in [0, 1], got {self.percent}")
        if self.cap is not None and self.cap < 0:
            raise ValueError(f"Rake cap must be >= 0, got {self.cap}")

    def rake(self, pot: float) -> float:
        """Rake charged on a pot of the given size."""
        if self.percent <= 0 or pot <= 0:
            return 0.0
        amount = self.percent * pot
        if self.cap is not None:
            amount = min(amount, self.cap)
        return amount

    def for_street(self, street: str) -> RakeConfig:
        """Rake that applies to a decision on ``street`` (no flop, no drop)."""
        if self.no_flop_no_drop and street == "preflop":
            return replace(self, percent=0.0)
        return self


# ---------------------------------------------------------------------------
# Model coefficients
# ---------------------------------------------------------------------------

def _street_tables() -> dict[str, dict[str, Triple]]:
    return {
        "flop": {
            "small": (0.4, 0.5, 0.1),
            "medium": (0.6, 0.3, 0.1),
            "large": (0.8, 0.15, 0.05),
            "very_large": (0.9, 0.08, 0.02),
            "all_in": (0.7, 0.3, 0.0),
        },
        "turn": {
            "small": (0.3, 0.6, 0.1),
            "medium": (0.5, 0.4, 0.1),
            "large": (0.7, 0.25, 0.05),
            "very_large": (0.85, 0.12, 0.03),
            "all_in": (0.6, 0.4, 0.0),
        },
        "river": {
            "small": (0.25, 0.65, 0.1),
            "medium": (0.4, 0.5, 0.1),
            "large": (0.6, 0.3, 0.1),
            "very_large": (0.8, 0.15, 0.05),
            "all_in": (0.5, 0.5, 0.0),
        },
    }


@dataclass(frozen=True)
class ModelConfig:
    """Coefficient tables of the opponent response model.

    These are hand-set priors, not fitted values. Offsets are
    ``(fold, call, raise)`` triples unless stated otherwise.
    """

    street_base_frequencies: dict[str, dict[str, Triple]] = field(
        default_factory=_street_tables
    )
    neutral_frequencies: Triple = (0.5, 0.3, 0.2)
    gto_fold_by_sizing: dict[str, float] = field(default_factory=lambda: {
        "small": 0.4, "medium": 0.6, "large": 0.8, "very_large": 0.9, "all_in": 0.7,
    })
    base_fold_weights: dict[str, float] = field(default_factory=lambda: {
        "gto": 0.25, "bet_sizing": 0.25, "pot_odds": 0.20,
        "range_strength": 0.20, "street": 0.10,
    })
    base_fold_bounds: tuple[float, float] = (0.05, 0.95)
    range_adjustment_envelope: float = 0.15
    position_offsets: dict[str, float] = field(default_factory=lambda: {
        "in_position": -0.15, "out_of_position": 0.20, "blind_vs_blind": -0.10,
    })
    position_envelope: float = 0.30
    # Stack adjustments are in percentage points.
    stack_base_points: dict[str, float] = field(default_factory=lambda: {
        "deep": -10.0, "medium": 0.0, "short": 15.0, "all_in": 25.0,
    })
    stack_bounds_points: tuple[float, float] = (-30.0, 40.0)
    multiway_offsets: dict[str, float] = field(default_factory=lambda: {
        "heads_up": -0.10, "three_way": 0.05, "four_plus": 0.15,
    })
    multiway_bounds: tuple[float, float] = (-0.15, 0.25)
    raise_induction: dict[str, float] = field(default_factory=lambda: {
        "small": 1.4, "medium": 1.0, "large": 0.6, "very_large": 0.4, "all_in": 0.0,
    })
    aggression_weights: Triple = (0.05, 0.05, 0.1)
    texture_offsets: dict[str, Triple] = field(default_factory=lambda: {
        "dry": (0.10, -0.15, 0.05),
        "suited": (-0.15, 0.20, -0.05),
        "connected": (-0.10, 0.05, 0.05),
        "paired": (0.05, 0.05, -0.10),
        "trips": (0.20, -0.10, -0.10),
    })
    base_rates: Triple = (0.6, 0.3, 0.1)
    min_raise: float = 0.02
    nash_enabled: bool = True
    nash_confidence_threshold: float = 0.8


# ---------------------------------------------------------------------------
# Analyser settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalyserConfig:
    """Everything one analysis run reads. Passed by value, never mutated."""

    rake: RakeConfig = field(default_factory=RakeConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    samples: int = 1000
    seed: int | None = None
    classification_threshold: float = 0.0
    deadline_seconds: float | None = None
    alternative_sizings: tuple[float, ...] = (0.33, 0.66, 1.0)
    include_all_in: bool = True
    min_pot: float = 1.5


def _tupled(value: Any) -> Any:
    """Convert JSON lists (recursively, inside dicts too) to tuples."""
    if isinstance(value, list):
        return tuple(_tupled(v) for v in value)
    if isinstance(value, dict):
        return {k: _tupled(v) for k, v in value.items()}
    return value


def _merged(default: Any, override: Any) -> Any:
    """Overlay a JSON value onto a default, merging nested tables."""
    if isinstance(default, dict) and isinstance(override, dict):
        out = dict(default)
        for key, value in override.items():
            out[key] = _merged(default.get(key), value)
        return out
    return _tupled(override)


def _build(cls: type, data: dict[str, Any], section: str) -> Any:
    defaults = cls()
    known = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown %s config key: %s", section, key)
            continue
        kwargs[key] = _merged(getattr(defaults, key), value)
    return cls(**kwargs)


def load_analyser_config(config_path: Path | str | None = None) -> AnalyserConfig:
    """Load analyser configuration from a JSON file.

    Default path: ~/.hand_ev/config.json

    A missing file yields the defaults. An unreadable or invalid file is
    logged and also yields the defaults, so a bad config never stops a
    batch run.

    Expected JSON format (every key optional):
        {
            "samples": 2000,
            "seed": 7,
            "rake": {"percent": 0.05, "cap": 3, "no_flop_no_drop": true},
            "model": {"nash_confidence_threshold": 0.9,
                      "multiway_offsets": {"four_plus": 0.2}}
        }
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        return AnalyserConfig()

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read analyser config at %s: %s", path, e)
        return AnalyserConfig()

    if not isinstance(data, dict):
        logger.warning("Analyser config at %s is not a JSON object", path)
        return AnalyserConfig()

    try:
        data = dict(data)
        rake = _build(RakeConfig, data.pop("rake", None) or {}, "rake")
        model = _build(ModelConfig, data.pop("model", None) or {}, "model")
        config = _build(AnalyserConfig, data, "analyser")
    except (TypeError, ValueError) as e:
        logger.warning("Invalid analyser config at %s: %s", path, e)
        return AnalyserConfig()

    return replace(config, rake=rake, model=model)
