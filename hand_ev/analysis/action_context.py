"""Decision-point context: who is betting into whom, on what board, for how much."""

from __future__ import annotations

from dataclasses import dataclass, replace

from hand_ev.core.errors import InvalidHandRecord
from hand_ev.core.hand_record import BettingAction, HandRecord, PlayerSeat
from hand_ev.utils.card import Card
from hand_ev.utils.constants import (
    BLIND_LABELS,
    MONEY_ACTIONS,
    POSITION_LABELS,
    POSTFLOP_ORDER,
    ActionKind,
    GameType,
    Street,
)


def seat_labels(players: tuple[PlayerSeat, ...], button: int) -> dict[str, str]:
    """Map player ids to position labels, counting clockwise from the button.

    The full-ring label list is trimmed from the middle for shorter
    tables; heads-up the button is also the small blind and is labelled BTN.
    """
    seats = sorted(players, key=lambda p: (p.position - button) % (len(POSITION_LABELS)))
    n = len(seats)
    if n == 0:
        return {}
    if n == 2:
        labels = ["BTN", "BB"]
    else:
        middle = list(POSITION_LABELS[3:])
        k = n - 3
        extra = ([middle[0]] + middle[len(middle) - (k - 1):]) if k > 1 else middle[:k]
        labels = list(POSITION_LABELS[:min(n, 3)]) + extra
    return {seat.id: label for seat, label in zip(seats, labels)}


def _postflop_rank(label: str) -> int:
    return POSTFLOP_ORDER.index(label) if label in POSTFLOP_ORDER else -1


@dataclass(frozen=True)
class ActionContext:
    """Everything downstream stages need to know about one hero decision."""

    hand_id: str
    action_index: int
    action: BettingAction
    street: Street
    board: tuple[Card, ...]
    hero_id: str
    hero_cards: tuple[Card, Card]
    hero_label: str
    villain_id: str | None
    villain_label: str
    prior_actions: tuple[BettingAction, ...]
    postflop_actions: tuple[BettingAction, ...]
    pot: float
    hero_amount: float
    hero_street_committed: float
    villain_street_committed: float
    hero_remaining: float
    villain_remaining: float
    active_players: int
    players_left_to_act: int
    table_size: int
    game_type: GameType

    @property
    def effective_stack(self) -> float:
        return max(0.0, min(self.hero_remaining, self.villain_remaining))

    @property
    def call_cost(self) -> float:
        """Chips the villain must add to continue against the hero's action."""
        return max(
            0.0,
            self.hero_street_committed + self.hero_amount - self.villain_street_committed,
        )

    @property
    def in_position(self) -> bool:
        """True when the hero acts after the villain postflop."""
        return _postflop_rank(self.hero_label) > _postflop_rank(self.villain_label)

    @property
    def blind_vs_blind(self) -> bool:
        labels = {self.hero_label, self.villain_label}
        if self.table_size == 2 and "BTN" in labels:
            labels = {"SB" if lbl == "BTN" else lbl for lbl in labels}
        return labels <= BLIND_LABELS and len(labels) == 2

    @property
    def dead_cards(self) -> frozenset[Card]:
        return frozenset((*self.hero_cards, *self.board))

    @property
    def villain_actions(self) -> tuple[BettingAction, ...]:
        """The villain's actions before the decision, in play order."""
        return tuple(a for a in self.prior_actions if a.player_id == self.villain_id)

    def with_hero_amount(self, amount: float) -> ActionContext:
        """The same decision with the hero putting in a different amount."""
        return replace(self, hero_amount=max(0.0, float(amount)))


def postflop_stream(record: HandRecord) -> tuple[BettingAction, ...]:
    """The ordered postflop actions of a hand (empty when nothing was played)."""
    return tuple(a for a in record.actions if a.street != Street.PREFLOP)


def _committed(actions: list[BettingAction], player_id: str | None,
               street: Street | None = None) -> float:
    return sum(
        a.amount for a in actions
        if a.player_id == player_id
        and a.kind in MONEY_ACTIONS
        and (street is None or a.street == street)
    )


def extract_context(
    record: HandRecord, action_index: int, min_pot: float = 1.5,
) -> ActionContext | None:
    """Build the context for the hero's bet or raise at ``bettingActions[action_index]``.

    Args:
        record: Validated hand record.
        action_index: Index of the target action in the source document.
        min_pot: Floor for the pot before the action (the blinds).

    Returns:
        The decision context, or None when the hand has no actions at all.

    Raises:
        InvalidHandRecord: If the index does not name a hero bet or raise,
            or the hero has no seat.
    """
    if not record.actions:
        return None

    target = record.action_at(action_index)
    hero_id = record.hero_id
    if target.player_id != hero_id or not target.is_aggressive:
        raise InvalidHandRecord(
            f"Action {action_index} is not a hero bet or raise"
        )
    hero_seat = record.player(hero_id)
    if hero_seat is None:
        raise InvalidHandRecord(f"Hero {hero_id!r} has no seat in the hand")

    pos = record.actions.index(target)
    prior = list(record.actions[:pos])
    folded = {a.player_id for a in prior if a.kind == ActionKind.FOLD}

    villain_id = None
    for a in reversed(prior):
        if a.player_id != hero_id and a.player_id not in folded:
            villain_id = a.player_id
            break
    if villain_id is None:
        for seat in record.players:
            if seat.id != hero_id and seat.is_active and seat.id not in folded:
                villain_id = seat.id
                break

    labels = seat_labels(record.players, record.button_position)
    pot = max(min_pot, sum(a.amount for a in prior if a.kind in MONEY_ACTIONS))

    hero_remaining = max(0.0, hero_seat.stack_size - _committed(prior, hero_id))
    villain_seat = record.player(villain_id) if villain_id else None
    if villain_seat is not None:
        villain_remaining = max(
            0.0, villain_seat.stack_size - _committed(prior, villain_id)
        )
    else:
        villain_remaining = hero_remaining

    active = [s for s in record.players if s.is_active and s.id not in folded]
    street_actors = {a.player_id for a in prior if a.street == target.street}
    left_to_act = sum(
        1 for s in active
        if s.id not in (hero_id, villain_id) and s.id not in street_actors
    )

    return ActionContext(
        hand_id=record.id,
        action_index=action_index,
        action=target,
        street=target.street,
        board=tuple(record.community.visible_on(target.street)),
        hero_id=hero_id,
        hero_cards=record.hero_hole_cards,
        hero_label=labels.get(hero_id, ""),
        villain_id=villain_id,
        villain_label=labels.get(villain_id, "") if villain_id else "",
        prior_actions=tuple(prior),
        postflop_actions=postflop_stream(record),
        pot=pot,
        hero_amount=target.amount,
        hero_street_committed=_committed(prior, hero_id, target.street),
        villain_street_committed=_committed(prior, villain_id, target.street),
        hero_remaining=hero_remaining,
        villain_remaining=villain_remaining,
        active_players=max(2, len(active)),
        players_left_to_act=left_to_act,
        table_size=len(record.players),
        game_type=record.game_type,
    )
