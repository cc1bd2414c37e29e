"""Hand EV analysis: opponent response model, EV tree and classification.

Given a recorded hand, estimates for each hero bet or raise how the
opponent responds, what the hero's equity is against each response
range, the EV of each branch and of the whole action, and whether a
different action at the same node would have earned more.

Key public API:
    HandEVAnalyser      -- Staged analyser for one decision or a whole hand
    AnalyserConfig      -- Run settings, rake and model coefficients
    load_analyser_config -- JSON config loader with safe defaults
    Ok / InputError / Cancelled -- The three possible outcomes
    EVAnalysis          -- The record attached to a betting action
"""

from hand_ev.analysis.config import (
    AnalyserConfig,
    ModelConfig,
    RakeConfig,
    load_analyser_config,
)
from hand_ev.analysis.pipeline import HandEVAnalyser
from hand_ev.analysis.results import (
    AnalysisOutcome,
    Cancelled,
    Classification,
    EVAnalysis,
    Frequencies,
    FrequencyBands,
    InputError,
    LocalDegeneracy,
    Ok,
    Stage,
    ValidationTrace,
)

__all__ = [
    "AnalyserConfig",
    "AnalysisOutcome",
    "Cancelled",
    "Classification",
    "EVAnalysis",
    "Frequencies",
    "FrequencyBands",
    "HandEVAnalyser",
    "InputError",
    "LocalDegeneracy",
    "ModelConfig",
    "Ok",
    "RakeConfig",
    "Stage",
    "ValidationTrace",
    "load_analyser_config",
]
