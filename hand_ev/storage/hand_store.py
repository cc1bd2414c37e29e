"""Persistent hand history store.

Keeps hand documents as JSON in a SQLite database
(~/.hand_ev/hands.db by default) with WAL mode so a batch analysis can
write while another process reads. Analyses are written back onto the
betting action they describe, under ``evAnalysis``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from hand_ev.analysis.results import EVAnalysis

logger = logging.getLogger("hand_ev.storage")

_DATA_DIR = Path.home() / ".hand_ev"
_DB_FILE = _DATA_DIR / "hands.db"

_CREATE_HANDS_TABLE = """\
CREATE TABLE IF NOT EXISTS hands (
    id         TEXT PRIMARY KEY,
    username   TEXT NOT NULL,
    document   TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

_CREATE_USER_INDEX = """\
CREATE INDEX IF NOT EXISTS hands_username ON hands (username);
"""

_UPSERT_HAND = """\
INSERT INTO hands (id, username, document) VALUES (?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    username   = excluded.username,
    document   = excluded.document,
    updated_at = datetime('now');
"""

_UPDATE_DOCUMENT = """\
UPDATE hands SET document = ?, updated_at = datetime('now') WHERE id = ?;
"""


class HandStore:
    """Hand documents keyed by hand id.

    Every write commits immediately. ``store_ev_analysis`` reads,
    modifies and writes a document inside one transaction.
    """

    def __init__(self, db_path: Path | str | None = None) -> None:
        self._db_path = Path(db_path) if db_path else _DB_FILE
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.execute(_CREATE_HANDS_TABLE)
        self._conn.execute(_CREATE_USER_INDEX)
        self._conn.commit()

    def save_hand(self, document: dict[str, Any]) -> str:
        """Insert or replace a hand document. Returns its id."""
        hand_id = document.get("id")
        if hand_id in (None, ""):
            raise ValueError("Hand document has no id")
        hand_id = str(hand_id)
        self._conn.execute(_UPSERT_HAND, (
            hand_id, str(document.get("username") or ""), json.dumps(document),
        ))
        self._conn.commit()
        logger.debug("Saved hand %s", hand_id)
        return hand_id

    def get_hand(self, hand_id: str) -> dict[str, Any]:
        """Return the stored document.

        Raises:
            KeyError: If no hand has that id.
        """
        row = self._conn.execute(
            "SELECT document FROM hands WHERE id = ?", (hand_id,),
        ).fetchone()
        if row is None:
            raise KeyError(hand_id)
        return json.loads(row[0])

    def hands_for_user(self, username: str) -> list[dict[str, Any]]:
        """All documents of a user, oldest id first."""
        rows = self._conn.execute(
            "SELECT document FROM hands WHERE username = ? ORDER BY id",
            (username,),
        ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def delete_hand(self, hand_id: str) -> bool:
        """Delete a hand. Returns False if it did not exist."""
        cur = self._conn.execute("DELETE FROM hands WHERE id = ?", (hand_id,))
        self._conn.commit()
        return cur.rowcount > 0

    def store_ev_analysis(self, hand_id: str, action_index: int,
                          analysis: EVAnalysis | dict[str, Any]) -> None:
        """Replace ``bettingActions[action_index].evAnalysis`` of a stored hand.

        Args:
            hand_id: Id of a stored hand.
            action_index: Index into the document's ``bettingActions``.
            analysis: The analysis record, or its serialised form.

        Raises:
            KeyError: If no hand has that id.
            IndexError: If the hand has no action at ``action_index``.
        """
        payload = analysis.to_dict() if isinstance(analysis, EVAnalysis) else analysis
        with self._conn:
            self._conn.execute("BEGIN IMMEDIATE")
            row = self._conn.execute(
                "SELECT document FROM hands WHERE id = ?", (hand_id,),
            ).fetchone()
            if row is None:
                raise KeyError(hand_id)
            document = json.loads(row[0])
            actions = document.get("bettingActions") or []
            if not 0 <= action_index < len(actions):
                raise IndexError(
                    f"Hand {hand_id} has no betting action {action_index}"
                )
            actions[action_index]["evAnalysis"] = payload
            self._conn.execute(_UPDATE_DOCUMENT, (json.dumps(document), hand_id))
        logger.debug("Stored evAnalysis for %s[%d]", hand_id, action_index)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None  # type: ignore[assignment]
