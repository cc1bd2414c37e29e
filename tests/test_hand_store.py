"""Tests for the SQLite hand store."""

import pytest

from hand_ev.analysis import AnalyserConfig, HandEVAnalyser, Ok
from hand_ev.storage.hand_store import HandStore


@pytest.fixture
def store(tmp_path):
    s = HandStore(db_path=tmp_path / "hands.db")
    yield s
    s.close()


class TestHands:
    def test_save_and_get(self, store: HandStore, flop_hand: dict) -> None:
        assert store.save_hand(flop_hand) == "h1"
        assert store.get_hand("h1") == flop_hand

    def test_save_replaces(self, store: HandStore, flop_hand: dict) -> None:
        store.save_hand(flop_hand)
        flop_hand["gameType"] = "tournament"
        store.save_hand(flop_hand)
        assert store.get_hand("h1")["gameType"] == "tournament"
        assert len(store.hands_for_user("alice")) == 1

    def test_requires_id(self, store: HandStore, flop_hand: dict) -> None:
        del flop_hand["id"]
        with pytest.raises(ValueError):
            store.save_hand(flop_hand)

    def test_unknown_hand(self, store: HandStore) -> None:
        with pytest.raises(KeyError):
            store.get_hand("missing")

    def test_hands_for_user(self, store: HandStore, flop_hand: dict,
                            river_hand: dict) -> None:
        store.save_hand(river_hand)
        store.save_hand(flop_hand)
        other = dict(flop_hand, id="h3", username="bob")
        store.save_hand(other)
        assert [h["id"] for h in store.hands_for_user("alice")] == ["h1", "h2"]
        assert store.hands_for_user("carol") == []

    def test_delete(self, store: HandStore, flop_hand: dict) -> None:
        store.save_hand(flop_hand)
        assert store.delete_hand("h1")
        assert not store.delete_hand("h1")

    def test_persists_across_connections(self, tmp_path, flop_hand: dict) -> None:
        path = tmp_path / "hands.db"
        first = HandStore(db_path=path)
        first.save_hand(flop_hand)
        first.close()
        second = HandStore(db_path=path)
        assert second.get_hand("h1")["id"] == "h1"
        second.close()


class TestEVAnalysis:
    def test_round_trip(self, store: HandStore, flop_hand: dict) -> None:
        store.save_hand(flop_hand)
        outcome = HandEVAnalyser(AnalyserConfig(samples=100, seed=3)).analyse(flop_hand, 5)
        assert isinstance(outcome, Ok)

        store.store_ev_analysis("h1", 5, outcome.analysis)
        stored = store.get_hand("h1")["bettingActions"][5]["evAnalysis"]
        assert stored == outcome.analysis.to_dict()

    def test_replaces_previous(self, store: HandStore, flop_hand: dict) -> None:
        store.save_hand(flop_hand)
        store.store_ev_analysis("h1", 5, {"totalEV": 1.0})
        store.store_ev_analysis("h1", 5, {"totalEV": 2.0})
        doc = store.get_hand("h1")
        assert doc["bettingActions"][5]["evAnalysis"] == {"totalEV": 2.0}
        assert "evAnalysis" not in doc["bettingActions"][4]

    def test_unknown_hand(self, store: HandStore) -> None:
        with pytest.raises(KeyError):
            store.store_ev_analysis("missing", 0, {})

    def test_bad_index_leaves_document(self, store: HandStore, flop_hand: dict) -> None:
        store.save_hand(flop_hand)
        with pytest.raises(IndexError):
            store.store_ev_analysis("h1", 42, {"totalEV": 1.0})
        assert store.get_hand("h1") == flop_hand
