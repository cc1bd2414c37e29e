"""HandEVAnalyser: the staged EV pipeline for one hero decision.

Stages run in a fixed order. Each one reads a frozen run state and
returns a new one with its own outputs filled in, so no stage can touch
what an earlier stage produced. Between stages the wall-clock deadline
is checked; when it has passed the run stops with ``Cancelled`` naming
the last finished stage.

Usage:
    analyser = HandEVAnalyser(AnalyserConfig(seed=7))
    outcome = analyser.analyse(hand_document, action_index=4)
    if isinstance(outcome, Ok):
        print(outcome.analysis.to_dict())
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable

from hand_ev.analysis.action_context import ActionContext, extract_context
from hand_ev.analysis.action_features import ActionFeatures, extract_features
from hand_ev.analysis.comparator import (
    CHECK,
    Comparison,
    alternative_actions,
    classify,
    hero_label,
)
from hand_ev.analysis.config import AnalyserConfig, RakeConfig
from hand_ev.analysis.ev_tree import branch_evs, call_ev, total_ev
from hand_ev.analysis.frequencies import FrequencyInputs, frequency_inputs
from hand_ev.analysis.raise_sizing import RaiseSizing, raise_sizing
from hand_ev.analysis.range_strength import (
    RangeStrength,
    neutral_strength,
    range_strength,
)
from hand_ev.analysis.ranges import Range, conditional_range, range_after_actions
from hand_ev.analysis.response_model import (
    ResponseEstimate,
    estimate_response,
    frequency_bands,
)
from hand_ev.analysis.results import (
    AnalysisOutcome,
    BranchEVs,
    Cancelled,
    Candidate,
    EVAnalysis,
    FrequencyBands,
    InputError,
    LocalDegeneracy,
    Ok,
    Stage,
)
from hand_ev.core.equity_calculator import EquityCalculator, EquityResult
from hand_ev.core.errors import HandEVError, InvalidHandRecord
from hand_ev.core.hand_record import HandRecord
from hand_ev.utils.card import make_combo
from hand_ev.utils.constants import ActionKind

logger = logging.getLogger("hand_ev.analysis")


@dataclass(frozen=True)
class _NodeEV:
    """Response model and branch EVs for one hero amount at the node."""

    features: ActionFeatures
    inputs: FrequencyInputs | None
    response: ResponseEstimate
    sizing: RaiseSizing
    branches: BranchEVs
    total: float


@dataclass(frozen=True)
class _RunState:
    record: HandRecord
    action_index: int
    ctx: ActionContext | None = None
    features: ActionFeatures | None = None
    current_range: Range | None = None
    strength: RangeStrength | None = None
    inputs: FrequencyInputs | None = None
    response: ResponseEstimate | None = None
    bands: FrequencyBands | None = None
    calling_range: Range | None = None
    raising_range: Range | None = None
    equity_current: EquityResult | None = None
    equity_call: EquityResult | None = None
    equity_raise: EquityResult | None = None
    rake: RakeConfig | None = None
    node: _NodeEV | None = None
    candidates: tuple[Candidate, ...] = ()
    comparison: Comparison | None = None
    degeneracies: tuple[LocalDegeneracy, ...] = ()

    def degenerate(self, stage: Stage, reason: str) -> _RunState:
        logger.warning(
            "%s[%d] %s degenerate: %s", self.record.id, self.action_index, stage, reason,
        )
        return replace(
            self, degeneracies=self.degeneracies + (LocalDegeneracy(stage, reason),),
        )


class HandEVAnalyser:
    """Computes the EV of a hero bet or raise and classifies it.

    Stateless between calls: every run builds its own generator from
    ``config.seed``, so two analysers with the same configuration give
    identical results and can run in parallel.
    """

    def __init__(self, config: AnalyserConfig | None = None,
                 clock: Callable[[], float] = time.perf_counter) -> None:
        self.config = config or AnalyserConfig()
        self._clock = clock
        self._stages: tuple[tuple[Stage, Callable[[_RunState], _RunState]], ...] = (
            (Stage.CONTEXT, self._context),
            (Stage.FEATURES, self._features),
            (Stage.RANGE_STRENGTH, self._range_strength),
            (Stage.FREQUENCIES, self._frequencies),
            (Stage.RESPONSE, self._response),
            (Stage.RANGES, self._ranges),
            (Stage.EQUITY, self._equity),
            (Stage.BRANCH_EV, self._branch_ev),
            (Stage.ALTERNATIVES, self._alternatives),
            (Stage.CLASSIFICATION, self._classification),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyse(self, hand: HandRecord | dict[str, Any], action_index: int) -> AnalysisOutcome:
        """Analyse the hero action at ``bettingActions[action_index]``.

        Args:
            hand: A HandRecord or a raw hand document.
            action_index: Index of a hero bet or raise in the document.

        Returns:
            ``Ok`` with the analysis, ``InputError`` for a malformed hand
            or a target that is not a hero bet/raise, or ``Cancelled``
            when the deadline passed.
        """
        t_start = self._clock()
        try:
            record = hand if isinstance(hand, HandRecord) else HandRecord.from_dict(hand)
        except HandEVError as e:
            logger.info("Rejected hand: %s: %s", e.kind, e)
            return InputError(e.kind, str(e))

        state = _RunState(record=record, action_index=action_index)
        deadline = self.config.deadline_seconds
        for stage, step in self._stages:
            t0 = self._clock()
            try:
                state = step(state)
            except HandEVError as e:
                logger.info(
                    "%s[%d] rejected at %s: %s: %s",
                    record.id, action_index, stage, e.kind, e,
                )
                return InputError(e.kind, str(e))
            now = self._clock()
            logger.debug(
                "%s[%d] %s done (%.1fms)",
                record.id, action_index, stage, (now - t0) * 1000,
            )
            if deadline is not None and now - t_start >= deadline:
                logger.info(
                    "%s[%d] cancelled after %s (%.1fms)",
                    record.id, action_index, stage, (now - t_start) * 1000,
                )
                return Cancelled(stage)

        analysis = self._assemble(state)
        logger.info(
            "%s[%d] %s totalEV=%.3f best=%s delta=%.3f %s (%.1fms)",
            record.id,
            action_index,
            hero_label(state.ctx),
            analysis.total_ev,
            analysis.best_alternative.label,
            analysis.delta,
            analysis.classification,
            (self._clock() - t_start) * 1000,
        )
        return Ok(
            hand_id=record.id,
            action_index=action_index,
            analysis=analysis,
            degeneracies=state.degeneracies,
        )

    def analyse_hand(self, hand: HandRecord | dict[str, Any]) -> list[AnalysisOutcome]:
        """Analyse every hero bet and raise of a hand, in play order."""
        try:
            record = hand if isinstance(hand, HandRecord) else HandRecord.from_dict(hand)
        except HandEVError as e:
            return [InputError(e.kind, str(e))]
        return [self.analyse(record, index) for index in record.hero_decisions()]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _context(self, state: _RunState) -> _RunState:
        ctx = extract_context(state.record, state.action_index, self.config.min_pot)
        if ctx is None:
            raise InvalidHandRecord("Hand has no betting actions")
        if ctx.villain_id is None:
            state = state.degenerate(Stage.CONTEXT, "no opponent in the hand")
        return replace(state, ctx=ctx)

    def _features(self, state: _RunState) -> _RunState:
        features = extract_features(state.ctx)
        if features.pot <= 0:
            state = state.degenerate(Stage.FEATURES, "zero pot")
        return replace(state, features=features)

    def _range_strength(self, state: _RunState) -> _RunState:
        ctx = state.ctx
        community = state.record.community
        boards = {a.index: community.visible_on(a.street) for a in ctx.villain_actions}
        current = range_after_actions(ctx.villain_actions, boards, ctx.dead_cards)
        if not current:
            state = state.degenerate(Stage.RANGE_STRENGTH, "empty villain range")
            strength = neutral_strength(ctx.board)
        else:
            strength = range_strength(current, ctx.board)
        return replace(state, current_range=current, strength=strength)

    def _frequencies(self, state: _RunState) -> _RunState:
        return replace(state, inputs=self._cascade(state.ctx, state.features, state.strength))

    def _response(self, state: _RunState) -> _RunState:
        response = estimate_response(
            state.ctx, state.features, state.inputs, state.strength.texture,
            self.config.model,
        )
        if response.reason:
            state = state.degenerate(Stage.RESPONSE, response.reason)
        score = response.nash_confidence if response.gto is not None else response.confidence
        bands = frequency_bands(response.frequencies, score, state.strength)
        return replace(state, response=response, bands=bands)

    def _ranges(self, state: _RunState) -> _RunState:
        ctx = state.ctx
        board = list(ctx.board)
        calling = conditional_range(state.current_range, ActionKind.CALL, board, ctx.dead_cards)
        raising = conditional_range(state.current_range, ActionKind.RAISE, board, ctx.dead_cards)
        if not calling:
            state = state.degenerate(Stage.RANGES, "empty calling range")
        if not raising:
            state = state.degenerate(Stage.RANGES, "empty raising range")
        return replace(state, calling_range=calling, raising_range=raising)

    def _equity(self, state: _RunState) -> _RunState:
        ctx = state.ctx
        hero = {make_combo(*ctx.hero_cards): 1.0}
        results = {}
        for name, villain in (
            ("current", state.current_range),
            ("call", state.calling_range),
            ("raise", state.raising_range),
        ):
            result = EquityCalculator.range_vs_range(
                ctx.board, hero, villain,
                samples=self.config.samples, seed=self.config.seed,
            )
            if result.is_degenerate:
                state = state.degenerate(Stage.EQUITY, f"equity vs {name}: {result.reason}")
            results[name] = result
        return replace(
            state,
            equity_current=results["current"],
            equity_call=results["call"],
            equity_raise=results["raise"],
        )

    def _branch_ev(self, state: _RunState) -> _RunState:
        rake = self.config.rake.for_street(state.ctx.street)
        node = self._node(
            state.ctx, state.features, state.inputs, state.response, state, rake,
        )
        return replace(state, rake=rake, node=node)

    def _alternatives(self, state: _RunState) -> _RunState:
        ctx = state.ctx
        candidates = [Candidate(hero_label(ctx), ctx.hero_amount, state.node.total)]
        for label, amount in alternative_actions(
            ctx, self.config.alternative_sizings, self.config.include_all_in,
        ):
            if label == CHECK:
                ev = call_ev(state.equity_current.mean, ctx.pot, 0.0, state.rake)
            else:
                alt_ctx = ctx.with_hero_amount(amount)
                features = extract_features(alt_ctx)
                inputs = self._cascade(alt_ctx, features, state.strength)
                response = estimate_response(
                    alt_ctx, features, inputs, state.strength.texture,
                    self.config.model,
                )
                ev = self._node(alt_ctx, features, inputs, response, state, state.rake).total
            candidates.append(Candidate(label, amount, round(ev, 3)))
        return replace(state, candidates=tuple(candidates))

    def _classification(self, state: _RunState) -> _RunState:
        comparison = classify(
            state.candidates[0], state.candidates, self.config.classification_threshold,
        )
        return replace(state, comparison=comparison)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cascade(self, ctx: ActionContext, features: ActionFeatures,
                 strength: RangeStrength) -> FrequencyInputs | None:
        if features.pot <= 0 or features.amount <= 0:
            return None
        return frequency_inputs(ctx, features, strength, self.config.model)

    @staticmethod
    def _node(ctx: ActionContext, features: ActionFeatures, inputs: FrequencyInputs | None,
              response: ResponseEstimate, state: _RunState, rake: RakeConfig) -> _NodeEV:
        sizing = raise_sizing(
            features.amount, features.pot, ctx.effective_stack, features.spr,
        )
        branches = branch_evs(
            pot=features.pot,
            bet=features.amount,
            raise_size=sizing.expected,
            equity_vs_call=state.equity_call.mean,
            equity_vs_raise=state.equity_raise.mean,
            rake=rake,
        )
        total = total_ev(response.frequencies, branches.fold, branches.call, branches.raise_)
        return _NodeEV(
            features=features,
            inputs=inputs,
            response=response,
            sizing=sizing,
            branches=branches,
            total=total,
        )

    @staticmethod
    def _assemble(state: _RunState) -> EVAnalysis:
        node = state.node
        response = state.response
        comparison = state.comparison
        return EVAnalysis(
            response_frequencies=response.frequencies,
            gto_frequencies=response.gto,
            equity_vs_call=state.equity_call.mean,
            equity_vs_raise=state.equity_raise.mean,
            branch_evs=node.branches,
            total_ev=node.total,
            best_alternative=comparison.best,
            classification=comparison.classification,
            delta=comparison.delta,
            ties=comparison.ties,
            candidates=comparison.ranked,
            assembled_frequencies=response.assembled,
            trace=response.trace,
            profile=response.profile,
            confidence=response.confidence,
            nash_confidence=response.nash_confidence,
            frequency_bands=state.bands,
            minimum_defense=node.inputs.mdf if node.inputs else 0.0,
            raise_sizes=node.sizing.sizes,
            raise_weights=node.sizing.weights,
            remaining_streets=node.features.remaining_streets,
            implied_odds=node.features.implied_odds,
            reverse_implied_odds=node.features.reverse_implied_odds,
            action_tags=node.features.tags,
        )
