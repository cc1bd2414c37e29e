"""Bet sizing, pot odds and action-pattern flags for a hero decision."""

from __future__ import annotations

from dataclasses import dataclass

from hand_ev.analysis.action_context import ActionContext
from hand_ev.utils.constants import (
    AGGRESSIVE_ACTIONS,
    STREET_ORDER,
    ActionKind,
    BetSizing,
    Street,
)


@dataclass(frozen=True)
class ActionFeatures:
    kind: ActionKind
    street: Street
    amount: float
    pot: float
    bet_to_pot: float
    sizing: BetSizing
    call_cost: float
    pot_odds: float
    effective_stack: float
    spr: float
    remaining_streets: int
    implied_odds: float
    reverse_implied_odds: float
    is_all_in: bool = False
    is_cbet: bool = False
    is_check_raise: bool = False
    is_donk_bet: bool = False
    is_three_bet: bool = False
    is_value_bet: bool = False
    is_bluff: bool = False

    @property
    def tags(self) -> tuple[str, ...]:
        """Names of the action-pattern flags that are set, e.g. ``("cbet",)``."""
        flags = (
            ("all_in", self.is_all_in),
            ("cbet", self.is_cbet),
            ("check_raise", self.is_check_raise),
            ("donk_bet", self.is_donk_bet),
            ("three_bet", self.is_three_bet),
            ("value_bet", self.is_value_bet),
            ("bluff", self.is_bluff),
        )
        return tuple(name for name, on in flags if on)


def classify_sizing(amount: float, pot: float, all_in: bool = False) -> BetSizing:
    """Bucket a bet by its size relative to the pot."""
    if amount <= 0:
        return BetSizing.NONE
    if all_in:
        return BetSizing.ALL_IN
    ratio = amount / pot if pot > 0 else float("inf")
    if ratio <= 0.33:
        return BetSizing.SMALL
    if ratio <= 1.0:
        return BetSizing.MEDIUM
    if ratio <= 2.0:
        return BetSizing.LARGE
    return BetSizing.VERY_LARGE


def pot_odds(call_cost: float, pot: float) -> float:
    """Break-even equity for the caller: ``call / (pot + call)``."""
    if call_cost <= 0 or pot <= 0:
        return 0.0
    return call_cost / (pot + call_cost)


def remaining_streets(street: Street) -> int:
    return max(0, len(STREET_ORDER) - STREET_ORDER[street] - 1)


def _spr_multiplier(spr: float, deep: float, medium: float, shallow: float) -> float:
    if spr > 10:
        return deep
    if spr > 5:
        return medium
    if spr > 2:
        return shallow
    return 1.0


def implied_odds(street: Street, spr: float) -> float:
    """Multiplier on the caller's pot odds from money still behind."""
    odds = _spr_multiplier(spr, 1.5, 1.3, 1.1)
    streets = remaining_streets(street)
    if streets == 2:
        odds *= 1.4
    elif streets == 1:
        odds *= 1.2
    if street == Street.FLOP:
        odds *= 1.1
    return odds


def reverse_implied_odds(street: Street, spr: float,
                         value_bet: bool, cbet: bool) -> float:
    odds = _spr_multiplier(spr, 1.4, 1.2, 1.1)
    if value_bet:
        odds *= 1.3
    if cbet:
        odds *= 1.1
    if street == Street.FLOP:
        odds *= 1.2
    elif street == Street.TURN:
        odds *= 1.1
    return odds


# ---------------------------------------------------------------------------
# Action patterns
# ---------------------------------------------------------------------------

def _is_cbet(ctx: ActionContext) -> bool:
    if ctx.street != Street.FLOP or ctx.action.kind != ActionKind.BET:
        return False
    if any(
        a.street == Street.FLOP and a.kind in AGGRESSIVE_ACTIONS
        for a in ctx.prior_actions
    ):
        return False
    preflop_raises = [
        a for a in ctx.prior_actions
        if a.street == Street.PREFLOP and a.kind in AGGRESSIVE_ACTIONS
    ]
    return bool(preflop_raises) and preflop_raises[-1].player_id == ctx.hero_id


def _is_check_raise(ctx: ActionContext) -> bool:
    if ctx.action.kind != ActionKind.RAISE or ctx.street == Street.PREFLOP:
        return False
    street_actions = [a for a in ctx.prior_actions if a.street == ctx.street]
    checked_at = None
    for i, a in enumerate(street_actions):
        if a.player_id == ctx.hero_id:
            if a.kind != ActionKind.CHECK:
                return False
            checked_at = i
            break
    if checked_at is None:
        return False
    return any(
        a.player_id != ctx.hero_id and a.kind in AGGRESSIVE_ACTIONS
        for a in street_actions[checked_at + 1:]
    )


def _is_donk_bet(ctx: ActionContext) -> bool:
    if ctx.action.kind != ActionKind.BET or ctx.street == Street.PREFLOP:
        return False
    if any(a.street == ctx.street for a in ctx.prior_actions):
        return False
    if ctx.in_position:
        return False
    previous = list(Street)[STREET_ORDER[ctx.street] - 1]
    aggressors = [
        a.player_id for a in ctx.prior_actions
        if a.street == previous and a.kind in AGGRESSIVE_ACTIONS
    ]
    return bool(aggressors) and aggressors[-1] != ctx.hero_id


def _is_three_bet(ctx: ActionContext) -> bool:
    if ctx.action.kind != ActionKind.RAISE:
        return False
    return any(
        a.street == ctx.street and a.kind == ActionKind.RAISE
        for a in ctx.prior_actions
    )


def _is_value_bet(kind: ActionKind, street: Street, ratio: float) -> bool:
    if kind not in AGGRESSIVE_ACTIONS:
        return False
    if street == Street.RIVER and ratio > 0.75:
        return True
    if street == Street.TURN and ratio > 1.0:
        return True
    return kind == ActionKind.RAISE and ratio > 1.5


def extract_features(ctx: ActionContext) -> ActionFeatures:
    """Derive sizing, odds and action-pattern flags from a decision context."""
    amount = ctx.hero_amount
    pot = ctx.pot
    ratio = amount / pot if pot > 0 else 0.0
    all_in = amount > 0 and (
        amount >= ctx.hero_remaining
        or (ctx.action.is_all_in and amount == ctx.action.amount)
    )
    sizing = classify_sizing(amount, pot, all_in)
    call_cost = ctx.call_cost
    spr = ctx.effective_stack / pot if pot > 0 else 0.0

    cbet = _is_cbet(ctx)
    check_raise = _is_check_raise(ctx)
    donk = _is_donk_bet(ctx)
    three_bet = _is_three_bet(ctx)
    value = _is_value_bet(ctx.action.kind, ctx.street, ratio)
    bluff = (
        ctx.street == Street.RIVER
        and not (cbet or check_raise or donk or three_bet or value)
    )

    return ActionFeatures(
        kind=ctx.action.kind,
        street=ctx.street,
        amount=amount,
        pot=pot,
        bet_to_pot=ratio,
        sizing=sizing,
        call_cost=call_cost,
        pot_odds=pot_odds(call_cost, pot),
        effective_stack=ctx.effective_stack,
        spr=spr,
        remaining_streets=remaining_streets(ctx.street),
        implied_odds=implied_odds(ctx.street, spr),
        reverse_implied_odds=reverse_implied_odds(ctx.street, spr, value, cbet),
        is_all_in=all_in,
        is_cbet=cbet,
        is_check_raise=check_raise,
        is_donk_bet=donk,
        is_three_bet=three_bet,
        is_value_bet=value,
        is_bluff=bluff,
    )
