#!/usr/bin/env python3
"""Analyse every hero bet and raise of a user's stored hands.

Each analysed action gets an ``evAnalysis`` record written back onto
it in the hand store, replacing any earlier analysis. Hands that fail
validation are reported and skipped; cancelled decisions are left
untouched.

Usage:
    # Analyse all of alice's hands in the default store
    python scripts/analyse_hands.py ~/.hand_ev/hands.db alice

    # Reproducible run with a smaller Monte Carlo budget
    python scripts/analyse_hands.py hands.db alice --seed 7 --samples 300

    # Use a config file and only print the verdicts
    python scripts/analyse_hands.py hands.db alice --config cfg.json --dry-run

    # Show the validation trace, frequency bands and raise sizes too
    python scripts/analyse_hands.py hands.db alice --dry-run --audit
"""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path so we can import hand_ev
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hand_ev.analysis import (
    AnalyserConfig,
    Cancelled,
    HandEVAnalyser,
    InputError,
    Ok,
    load_analyser_config,
)
from hand_ev.storage.hand_store import HandStore

logger = logging.getLogger("hand_ev.scripts.analyse_hands")


def build_config(args: argparse.Namespace) -> AnalyserConfig:
    config = load_analyser_config(args.config)
    if args.seed is not None:
        config = replace(config, seed=args.seed)
    if args.samples is not None:
        config = replace(config, samples=args.samples)
    return config


def analyse_user(store: HandStore, username: str, analyser: HandEVAnalyser,
                 dry_run: bool = False, audit: bool = False) -> tuple[int, int, int]:
    """Analyse and store every decision of a user's hands.

    Returns:
        Tuple of (decisions_analysed, hands_rejected, decisions_cancelled).
    """
    analysed = rejected = cancelled = 0

    for document in store.hands_for_user(username):
        hand_id = document.get("id")
        for outcome in analyser.analyse_hand(document):
            if isinstance(outcome, InputError):
                print(f"  SKIP {hand_id}: {outcome.kind}: {outcome.message}")
                rejected += 1
                break
            if isinstance(outcome, Cancelled):
                print(f"  CANCELLED {hand_id} after {outcome.stage}")
                cancelled += 1
                continue

            assert isinstance(outcome, Ok)
            a = outcome.analysis
            tag = "[DRY RUN] " if dry_run else ""
            print(
                f"  {tag}{hand_id}[{outcome.action_index}] {a.classification} "
                f"totalEV={a.total_ev:.3f} best={a.best_alternative.label} "
                f"delta={a.delta:.3f}"
            )
            if audit:
                print(json.dumps(a.audit_dict(), indent=2))
            if not dry_run:
                try:
                    store.store_ev_analysis(hand_id, outcome.action_index, a)
                except (KeyError, IndexError, sqlite3.Error):
                    logger.exception(
                        "Failed to store analysis for %s[%d]",
                        hand_id, outcome.action_index,
                    )
                    continue
            analysed += 1

    return analysed, rejected, cancelled


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute and store the EV of every hero bet and raise.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("db", type=Path, help="Path to the hand store database")
    parser.add_argument("username", help="Whose hands to analyse")
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for the Monte Carlo generator (default: from config)",
    )
    parser.add_argument(
        "--samples", type=int, default=None,
        help="Monte Carlo matchup budget per equity estimate",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Analyser config JSON (default: ~/.hand_ev/config.json)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Analyse and print without writing to the store",
    )
    parser.add_argument(
        "--audit", action="store_true",
        help="Print how each response distribution and raise size was reached",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every stage",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    analyser = HandEVAnalyser(build_config(args))
    store = HandStore(db_path=args.db)
    try:
        analysed, rejected, cancelled = analyse_user(
            store, args.username, analyser, dry_run=args.dry_run, audit=args.audit,
        )
    finally:
        store.close()

    print(
        f"\nAnalysed {analysed} decisions "
        f"({rejected} hands rejected, {cancelled} decisions cancelled)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
