import json

import mongomock
import pytest

from wordibble.errors import CorruptSnapshotError
from wordibble.models.game import GameSession, GameSettings, GameState, GameStatus
from wordibble.services.persistence_service import (
    MemorySnapshotStore, MongoSnapshotStore, PersistenceController, migrate_snapshot
)

TODAY = "2025-09-01"


def make_session(player_id="p1", settings=None, **state_kwargs):
    state_kwargs.setdefault("word_length", 5)
    state_kwargs.setdefault("secret_word", "CRANE")
    return GameSession(
        player_id=player_id,
        settings=settings or GameSettings(),
        state=GameState(**state_kwargs),
        dictionary=set(),
        max_guesses=6,
        puzzle_date=TODAY,
    )


def legacy_snapshot(**overrides):
    data = {
        "date": TODAY,
        "wordLength": 5,
        "secretWord": "CRANE",
        "attempts": ["SLATE"],
        "lockedLetters": {"2": "A", "4": "E"},
        "revealedLetters": {},
        "gameStatus": "playing",
        "attemptIndex": 1,
        "currentGuess": ["", "", "A", "", "E"],
    }
    data.update(overrides)
    return json.dumps(data)


class FailingStore:

    def get(self, player_id):
        raise RuntimeError("store offline")

    def put(self, player_id, payload):
        raise RuntimeError("store offline")

    def delete(self, player_id):
        raise RuntimeError("store offline")


def test_save_and_restore_same_day(persistence, store):
    session = make_session(
        attempts=["SLATE"], attempt_index=1,
        locked_letters={2: "A", 4: "E"}, revealed_letters={0},
        letter_reveals_remaining=0, clue="Tall bird",
    )
    assert persistence.save(session, TODAY)

    raw = json.loads(store.get("p1"))
    assert raw["locked_letters"] == {"2": "A", "4": "E"}
    assert raw["version"] == 2

    state = persistence.restore("p1", TODAY)
    assert state.locked_letters == {2: "A", 4: "E"}
    assert state.revealed_letters == {0}
    assert state.attempts == ["SLATE"]
    assert state.attempt_index == 1
    assert state.letter_reveals_remaining == 0
    assert state.current_guess == ["C", "", "A", "", "E"]
    assert state.game_status is GameStatus.PLAYING


def test_stale_snapshot_is_discarded(persistence, store):
    persistence.save(make_session(), TODAY)

    assert persistence.restore("p1", "2025-09-02") is None
    assert store.get("p1") is None


@pytest.mark.parametrize("payload", [
    "{not json",
    "[1, 2, 3]",
    json.dumps({"date": TODAY, "version": 2, "word_length": 5, "secret_word": "CRANE",
                "attempts": ["SLATE"], "attempt_index": 3, "game_status": "playing"}),
    json.dumps({"date": TODAY, "version": 2, "word_length": 5, "secret_word": "CRANE",
                "attempts": [], "attempt_index": 0, "game_status": "paused"}),
    json.dumps({"date": TODAY, "version": 2, "word_length": 5, "secret_word": "CRANE",
                "attempts": [], "attempt_index": 0, "game_status": "playing",
                "locked_letters": {"0": "Z"}}),
    json.dumps({"date": TODAY, "version": 2, "word_length": 5, "secret_word": "CRANE",
                "attempts": [], "attempt_index": 0, "game_status": "playing",
                "revealed_letters": [0], "letter_reveals_remaining": 1}),
    json.dumps({"date": TODAY, "version": 9}),
])
def test_corrupt_snapshot_is_discarded(persistence, store, payload):
    store.put("p1", payload)

    assert persistence.restore("p1", TODAY) is None
    assert store.get("p1") is None


def test_missing_snapshot(persistence):
    assert persistence.restore("nobody", TODAY) is None


def test_legacy_snapshot_is_migrated(persistence, store):
    store.put("p1", legacy_snapshot())

    state = persistence.restore("p1", TODAY)
    assert state.word_length == 5
    assert state.secret_word == "CRANE"
    assert state.locked_letters == {2: "A", 4: "E"}
    assert state.revealed_letters == set()
    assert state.letter_reveals_remaining == 1
    assert state.clue is None


def test_legacy_revealed_letters_object(persistence, store):
    store.put("p1", legacy_snapshot(revealedLetters={"0": 3}))

    state = persistence.restore("p1", TODAY)
    assert state.revealed_letters == {3}
    assert state.letter_reveals_remaining == 0


def test_future_version_is_rejected():
    with pytest.raises(CorruptSnapshotError):
        migrate_snapshot({"version": 99})


def test_won_snapshot_shows_the_full_solution(persistence, store):
    store.put("p1", json.dumps({
        "version": 2, "date": TODAY, "word_length": 5, "secret_word": "CRANE",
        "attempts": ["CRANE"], "attempt_index": 1, "game_status": "won",
        "locked_letters": {"2": "A"}, "revealed_letters": [],
    }))

    state = persistence.restore("p1", TODAY)
    assert state.game_status is GameStatus.WON
    assert state.locked_letters == {0: "C", 1: "R", 2: "A", 3: "N", 4: "E"}


def test_only_daily_games_are_saved(persistence, store):
    random_session = make_session(settings=GameSettings(random_puzzle=True))
    assert not persistence.save(random_session, TODAY)

    archive_session = make_session()
    archive_session.is_archive = True
    assert not persistence.save(archive_session, TODAY)

    assert store.snapshots == {}


def test_store_failures_are_reported_not_raised():
    persistence = PersistenceController(FailingStore())

    assert persistence.save(make_session(), TODAY) is False
    assert persistence.restore("p1", TODAY) is None
    persistence.clear("p1")


def test_clear(persistence, store):
    persistence.save(make_session(), TODAY)
    persistence.clear("p1")
    assert store.get("p1") is None


class TestMongoSnapshotStore:

    @pytest.fixture
    def mongo_store(self):
        return MongoSnapshotStore(client=mongomock.MongoClient(), db_name="wordibble_test")

    def test_put_get_delete(self, mongo_store):
        assert mongo_store.get("p1") is None

        mongo_store.put("p1", '{"a": 1}')
        mongo_store.put("p1", '{"a": 2}')
        assert mongo_store.get("p1") == '{"a": 2}'
        assert mongo_store.collection.count_documents({}) == 1

        mongo_store.delete("p1")
        assert mongo_store.get("p1") is None

    def test_restore_through_controller(self, mongo_store):
        persistence = PersistenceController(mongo_store)
        persistence.save(make_session(attempts=["SLATE"], attempt_index=1,
                                      locked_letters={2: "A", 4: "E"}), TODAY)

        state = persistence.restore("p1", TODAY)
        assert state.locked_letters == {2: "A", 4: "E"}


def test_memory_store_delete_is_idempotent():
    store = MemorySnapshotStore()
    store.put("p1", "x")
    assert store.get("p1") == "x"
    store.delete("p1")
    store.delete("p1")
    assert store.get("p1") is None
