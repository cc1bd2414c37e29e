"""EV of each villain response to a hero bet, net of rake.

Amounts are in chips (or big blinds, as long as everything agrees).
``pot`` is the pot before the hero's action, ``bet`` the hero's
amount and ``raise_size`` the villain's raise on top of it.
"""

from __future__ import annotations

from hand_ev.analysis.config import RakeConfig
from hand_ev.analysis.results import BranchEVs, Frequencies


def fold_ev(pot: float, rake: RakeConfig) -> float:
    """Villain folds: hero takes the pot uncontested, rake comes out of it."""
    if pot <= 0:
        return 0.0
    return pot - rake.rake(pot)


def call_ev(equity: float, pot: float, bet: float, rake: RakeConfig) -> float:
    """Villain calls: showdown for ``pot + 2 * bet`` at ``equity``.

    With no bet the hero simply realises equity in the existing pot.
    """
    if bet <= 0:
        return equity * pot - equity * rake.rake(pot)
    pot_after = pot + 2 * bet
    return equity * pot_after - bet - equity * rake.rake(pot_after)


def raise_ev(equity: float, pot: float, bet: float, raise_size: float,
             rake: RakeConfig) -> float:
    """Villain raises: the better of giving up the bet and calling the raise.

    ``equity`` is the hero's equity against the raising range. A raise of
    zero degenerates to the call branch.
    """
    if raise_size <= 0:
        return call_ev(equity, pot, bet, rake)
    pot_after = pot + bet + 2 * raise_size
    continue_ev = equity * pot_after - raise_size - equity * rake.rake(pot_after)
    return max(-bet, continue_ev)


def total_ev(freq: Frequencies, fold: float, call: float, raise_: float) -> float:
    return round(freq.fold * fold + freq.call * call + freq.raise_ * raise_, 3)


def branch_evs(pot: float, bet: float, raise_size: float, equity_vs_call: float,
               equity_vs_raise: float, rake: RakeConfig) -> BranchEVs:
    """All three branches, with the inputs kept for the audit trail."""
    return BranchEVs(
        fold=fold_ev(pot, rake),
        call=call_ev(equity_vs_call, pot, bet, rake),
        raise_=raise_ev(equity_vs_raise, pot, bet, raise_size, rake),
        pot=pot,
        bet=bet,
        raise_size=raise_size,
        equity_vs_call=equity_vs_call,
        equity_vs_raise=equity_vs_raise,
        rake_percent=rake.percent,
        rake_cap=rake.cap,
    )
