"""Immutable hand record parsed from a stored hand document.

The document shape is the one the hand store persists::

    {
        "id": "...", "username": "...",
        "heroHoleCards": ["Ah", "Kd"],
        "communityCards": {"flop": ["2c", "7h", "Ts"], "turn": "Jd", "river": null},
        "bettingActions": [
            {"playerId": "p1", "action": "bet", "amount": 10,
             "street": "flop", "order": 3, "isAllIn": false},
        ],
        "players": [{"id": "p1", "position": 0, "stackSize": 100, "isActive": true}],
        "buttonPosition": 0, "heroPosition": 0,
        "gameType": "cash", "tournamentName": null,
    }

``HandRecord.from_dict`` is the single normalisation pass: every
input-shape problem is raised there, so downstream stages only ever see a
complete record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from hand_ev.core.errors import (
    InconsistentStreet,
    InvalidHandRecord,
    MissingHeroCards,
)
from hand_ev.utils.card import Card
from hand_ev.utils.constants import (
    AGGRESSIVE_ACTIONS,
    STREET_ORDER,
    ActionKind,
    GameType,
    Street,
)

MAX_SEAT = 8


@dataclass(frozen=True)
class BettingAction:
    """One action in the hand. ``index`` is its slot in the source document."""

    player_id: str
    kind: ActionKind
    amount: float
    street: Street
    order: int
    index: int
    is_all_in: bool = False
    ev_analysis: dict[str, Any] | None = field(default=None, compare=False)

    @property
    def is_aggressive(self) -> bool:
        return self.kind in AGGRESSIVE_ACTIONS


@dataclass(frozen=True)
class PlayerSeat:
    id: str
    position: int
    stack_size: float
    is_active: bool = True


@dataclass(frozen=True)
class CommunityCards:
    flop: tuple[Card, Card, Card] | None = None
    turn: Card | None = None
    river: Card | None = None

    def cards(self) -> list[Card]:
        """All dealt community cards in dealing order."""
        out: list[Card] = list(self.flop or ())
        if self.turn is not None:
            out.append(self.turn)
        if self.river is not None:
            out.append(self.river)
        return out

    def visible_on(self, street: Street) -> list[Card]:
        """Board cards visible to a player acting on ``street``."""
        if street == Street.PREFLOP or self.flop is None:
            return []
        out: list[Card] = list(self.flop)
        if street in (Street.TURN, Street.RIVER) and self.turn is not None:
            out.append(self.turn)
            if street == Street.RIVER and self.river is not None:
                out.append(self.river)
        return out


@dataclass(frozen=True)
class HandRecord:
    """A validated, read-only hand history."""

    id: str
    username: str
    hero_hole_cards: tuple[Card, Card]
    community: CommunityCards
    actions: tuple[BettingAction, ...]
    players: tuple[PlayerSeat, ...]
    button_position: int
    hero_position: int
    game_type: GameType = GameType.CASH
    tournament_name: str | None = None

    @property
    def hero_id(self) -> str:
        """Player id of the hero: the seat at ``hero_position``, else the username."""
        for seat in self.players:
            if seat.position == self.hero_position:
                return seat.id
        return self.username

    def player(self, player_id: str) -> PlayerSeat | None:
        for seat in self.players:
            if seat.id == player_id:
                return seat
        return None

    def action_at(self, index: int) -> BettingAction:
        """Return the action stored at ``bettingActions[index]``.

        Raises:
            InvalidHandRecord: If no action has that index.
        """
        for action in self.actions:
            if action.index == index:
                return action
        raise InvalidHandRecord(f"No betting action at index {index}")

    def hero_decisions(self) -> list[int]:
        """Document indices of every hero bet or raise, in play order."""
        hero = self.hero_id
        return [
            a.index for a in self.actions
            if a.player_id == hero and a.is_aggressive
        ]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> HandRecord:
        """Validate a hand document and build a record from it.

        Args:
            doc: Parsed JSON hand document.

        Returns:
            A HandRecord with actions sorted by ``order``.

        Raises:
            MissingHeroCards: If the hero does not have exactly two hole cards.
            InvalidCard: If any card string is malformed.
            InconsistentStreet: If streets go backwards or the board skips a street.
            InvalidHandRecord: For any other structural problem.
        """
        if not isinstance(doc, dict):
            raise InvalidHandRecord("Hand document must be an object")
        if doc.get("id") in (None, ""):
            raise InvalidHandRecord("Hand document has no id")

        hole_raw = doc.get("heroHoleCards")
        if not isinstance(hole_raw, (list, tuple)) or len(hole_raw) != 2:
            raise MissingHeroCards("Hero must have exactly two hole cards")
        hole = (Card.from_str(hole_raw[0]), Card.from_str(hole_raw[1]))

        community = _parse_community(doc.get("communityCards") or {})

        seen: set[Card] = set()
        for card in [*hole, *community.cards()]:
            if card in seen:
                raise InvalidHandRecord(f"Card {card} appears more than once")
            seen.add(card)

        actions = _parse_actions(doc.get("bettingActions") or [])
        players = _parse_players(doc.get("players") or [])

        try:
            game_type = GameType(doc.get("gameType") or GameType.CASH)
        except ValueError as e:
            raise InvalidHandRecord(f"Unknown game type {doc.get('gameType')!r}") from e

        return cls(
            id=str(doc["id"]),
            username=str(doc.get("username") or ""),
            hero_hole_cards=hole,
            community=community,
            actions=actions,
            players=players,
            button_position=_seat(doc.get("buttonPosition", 0), "buttonPosition"),
            hero_position=_seat(doc.get("heroPosition", 0), "heroPosition"),
            game_type=game_type,
            tournament_name=doc.get("tournamentName"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the document shape, actions in document order."""
        flop = self.community.flop
        actions = []
        for a in sorted(self.actions, key=lambda a: a.index):
            entry: dict[str, Any] = {
                "playerId": a.player_id,
                "action": a.kind.value,
                "amount": a.amount,
                "street": a.street.value,
                "order": a.order,
            }
            if a.is_all_in:
                entry["isAllIn"] = True
            if a.ev_analysis is not None:
                entry["evAnalysis"] = a.ev_analysis
            actions.append(entry)

        return {
            "id": self.id,
            "username": self.username,
            "heroHoleCards": [str(c) for c in self.hero_hole_cards],
            "communityCards": {
                "flop": [str(c) for c in flop] if flop else None,
                "turn": str(self.community.turn) if self.community.turn else None,
                "river": str(self.community.river) if self.community.river else None,
            },
            "bettingActions": actions,
            "players": [
                {
                    "id": p.id,
                    "position": p.position,
                    "stackSize": p.stack_size,
                    "isActive": p.is_active,
                }
                for p in self.players
            ],
            "buttonPosition": self.button_position,
            "heroPosition": self.hero_position,
            "gameType": self.game_type.value,
            "tournamentName": self.tournament_name,
        }


# ----------------------------------------------------------------------
# Field parsers
# ----------------------------------------------------------------------


def _seat(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_SEAT:
        raise InvalidHandRecord(f"{name} must be an integer in 0..{MAX_SEAT}, got {value!r}")
    return value


def _amount(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise InvalidHandRecord(f"Amount must be a non-negative number, got {value!r}")
    return float(value)


def _parse_community(raw: dict[str, Any]) -> CommunityCards:
    if not isinstance(raw, dict):
        raise InvalidHandRecord("communityCards must be an object")

    flop_raw = raw.get("flop")
    flop = None
    if flop_raw:
        if not isinstance(flop_raw, (list, tuple)) or len(flop_raw) != 3:
            raise InvalidHandRecord("Flop must have exactly three cards")
        flop = tuple(Card.from_str(c) for c in flop_raw)
        if len(set(flop)) != 3:
            raise InvalidHandRecord("Flop cards must be distinct")

    turn = Card.from_str(raw["turn"]) if raw.get("turn") else None
    river = Card.from_str(raw["river"]) if raw.get("river") else None

    if turn is not None and flop is None:
        raise InconsistentStreet("Turn card present without a flop")
    if river is not None and turn is None:
        raise InconsistentStreet("River card present without a turn")
    return CommunityCards(flop=flop, turn=turn, river=river)


def _parse_actions(raw: list[Any]) -> tuple[BettingAction, ...]:
    if not isinstance(raw, list):
        raise InvalidHandRecord("bettingActions must be a list")

    actions: list[BettingAction] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise InvalidHandRecord(f"Betting action {i} must be an object")
        try:
            kind = ActionKind(entry.get("action"))
        except ValueError as e:
            raise InvalidHandRecord(
                f"Betting action {i} has unknown kind {entry.get('action')!r}"
            ) from e
        try:
            street = Street(entry.get("street"))
        except ValueError as e:
            raise InvalidHandRecord(
                f"Betting action {i} has unknown street {entry.get('street')!r}"
            ) from e
        if entry.get("playerId") in (None, ""):
            raise InvalidHandRecord(f"Betting action {i} has no playerId")

        order = entry.get("order", i)
        if isinstance(order, bool) or not isinstance(order, int):
            raise InvalidHandRecord(f"Betting action {i} has a non-integer order")

        actions.append(BettingAction(
            player_id=str(entry["playerId"]),
            kind=kind,
            amount=_amount(entry.get("amount", 0)),
            street=street,
            order=order,
            index=i,
            is_all_in=bool(entry.get("isAllIn", False)),
            ev_analysis=entry.get("evAnalysis"),
        ))

    actions.sort(key=lambda a: (a.order, a.index))
    for prev, cur in zip(actions, actions[1:]):
        if STREET_ORDER[cur.street] < STREET_ORDER[prev.street]:
            raise InconsistentStreet(
                f"Action {cur.index} on {cur.street} follows an action on {prev.street}"
            )
    return tuple(actions)


def _parse_players(raw: list[Any]) -> tuple[PlayerSeat, ...]:
    if not isinstance(raw, list):
        raise InvalidHandRecord("players must be a list")

    players = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or entry.get("id") in (None, ""):
            raise InvalidHandRecord(f"Player {i} must be an object with an id")
        players.append(PlayerSeat(
            id=str(entry["id"]),
            position=_seat(entry.get("position", i), f"players[{i}].position"),
            stack_size=_amount(entry.get("stackSize", 0)),
            is_active=bool(entry.get("isActive", True)),
        ))
    return tuple(players)
