"""
Persistence Service

Saves a player's in-progress daily puzzle and restores it later the same
day. A snapshot is only trusted when its date equals today's puzzle date;
stale or malformed snapshots are deleted and the caller starts fresh.

Snapshots are JSON text kept in a snapshot store. JSON turns integer keys
into strings, so locked-letter positions are normalized back to integers on
every restore.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

from ..config.game_settings import LETTER_REVEALS_PER_PUZZLE, SNAPSHOT_VERSION, WORD_LENGTHS
from ..errors import CorruptSnapshotError
from ..models.game import GameSession, GameState, GameStatus
from ..utils.game_logger import game_logger


class MemorySnapshotStore:
    """Snapshot store kept in process memory."""

    def __init__(self):
        self.snapshots: Dict[str, str] = {}

    def get(self, player_id: str) -> Optional[str]:
        return self.snapshots.get(player_id)

    def put(self, player_id: str, payload: str) -> None:
        self.snapshots[player_id] = payload

    def delete(self, player_id: str) -> None:
        self.snapshots.pop(player_id, None)


class MongoSnapshotStore:
    """Snapshot store backed by a MongoDB collection, one document per player."""

    def __init__(self, mongo_uri: Optional[str] = None, db_name: str = 'wordibble', client=None):
        self.client = client if client is not None else MongoClient(mongo_uri, server_api=ServerApi('1'))
        self.db = self.client[db_name]
        self.collection = self.db.puzzle_snapshots
        self.collection.create_index("player_id", unique=True)

    def get(self, player_id: str) -> Optional[str]:
        document = self.collection.find_one({"player_id": player_id})
        return document.get("payload") if document else None

    def put(self, player_id: str, payload: str) -> None:
        self.collection.update_one(
            {"player_id": player_id},
            {"$set": {"payload": payload, "updated_at": datetime.now(timezone.utc)}},
            upsert=True
        )

    def delete(self, player_id: str) -> None:
        self.collection.delete_one({"player_id": player_id})


# ---------------------------------------------------------------------------
# Snapshot format migrations
# ---------------------------------------------------------------------------

_V1_KEYS = {
    'wordLength': 'word_length',
    'secretWord': 'secret_word',
    'lockedLetters': 'locked_letters',
    'revealedLetters': 'revealed_letters',
    'gameStatus': 'game_status',
    'attemptIndex': 'attempt_index',
    'letterRevealsRemaining': 'letter_reveals_remaining',
    'currentGuess': 'current_guess',
}


def _migrate_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Version 1 is the browser-era layout: camelCase keys, and revealed letters
    written either as an array or as an object (a serialized Set).
    """
    migrated = {_V1_KEYS.get(key, key): value for key, value in data.items()}

    revealed = migrated.get('revealed_letters')
    if isinstance(revealed, dict):
        migrated['revealed_letters'] = list(revealed.values())
    elif revealed is None:
        migrated['revealed_letters'] = []

    if 'letter_reveals_remaining' not in migrated:
        used = len(migrated['revealed_letters']) if isinstance(migrated['revealed_letters'], list) else 0
        migrated['letter_reveals_remaining'] = max(LETTER_REVEALS_PER_PUZZLE - used, 0)

    migrated['version'] = 2
    return migrated


MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _migrate_v1,
}


def migrate_snapshot(data: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade a decoded snapshot to the current version."""
    version = data.get('version', 1)
    if not isinstance(version, int) or version > SNAPSHOT_VERSION:
        raise CorruptSnapshotError(f"Unsupported snapshot version: {version!r}")
    while version < SNAPSHOT_VERSION:
        if version not in MIGRATIONS:
            raise CorruptSnapshotError(f"No migration from snapshot version {version}")
        data = MIGRATIONS[version](data)
        version = data['version']
    return data


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise CorruptSnapshotError(message)


def serialize_state(state: GameState, current_day: str, max_guesses: Optional[int] = None) -> Dict[str, Any]:
    """Snapshot dict for a game state, in the current format."""
    return {
        'version': SNAPSHOT_VERSION,
        'date': current_day,
        'word_length': state.word_length,
        'secret_word': state.secret_word,
        'clue': state.clue,
        'attempts': list(state.attempts),
        'locked_letters': {str(pos): letter for pos, letter in sorted(state.locked_letters.items())},
        'revealed_letters': sorted(state.revealed_letters),
        'game_status': state.game_status.value,
        'attempt_index': state.attempt_index,
        'letter_reveals_remaining': state.letter_reveals_remaining,
        'current_guess': list(state.current_guess),
        'max_guesses': max_guesses,
    }


def deserialize_state(data: Dict[str, Any]) -> GameState:
    """
    Rebuild a GameState from a current-format snapshot dict.

    Raises:
        CorruptSnapshotError: if any field has the wrong shape
    """
    word_length = data.get('word_length')
    _require(word_length in WORD_LENGTHS, f"Bad word length: {word_length!r}")

    secret = data.get('secret_word')
    _require(isinstance(secret, str) and len(secret) == word_length and secret.isalpha(),
             "Bad secret word")
    secret = secret.upper()

    attempts = data.get('attempts')
    _require(isinstance(attempts, list), "Attempts must be a list")
    _require(all(isinstance(a, str) and len(a) == word_length and a.isalpha() for a in attempts),
             "Malformed attempt")
    attempts = [a.upper() for a in attempts]

    attempt_index = data.get('attempt_index')
    _require(attempt_index == len(attempts), "Attempt index does not match attempts")

    try:
        game_status = GameStatus(data.get('game_status'))
    except ValueError:
        raise CorruptSnapshotError(f"Bad game status: {data.get('game_status')!r}")

    raw_locked = data.get('locked_letters') or {}
    _require(isinstance(raw_locked, dict), "Locked letters must be an object")
    locked_letters: Dict[int, str] = {}
    for key, letter in raw_locked.items():
        try:
            position = int(key)
        except (TypeError, ValueError):
            raise CorruptSnapshotError(f"Bad locked position: {key!r}")
        if letter in (None, ''):
            continue
        _require(0 <= position < word_length, f"Locked position out of range: {position}")
        _require(isinstance(letter, str) and letter.upper() == secret[position],
                 f"Locked letter at {position} does not match the secret")
        locked_letters[position] = letter.upper()

    raw_revealed = data.get('revealed_letters') or []
    _require(isinstance(raw_revealed, list), "Revealed letters must be a list")
    _require(all(isinstance(p, int) and 0 <= p < word_length for p in raw_revealed),
             "Revealed position out of range")

    reveals_remaining = data.get('letter_reveals_remaining', LETTER_REVEALS_PER_PUZZLE)
    _require(isinstance(reveals_remaining, int) and reveals_remaining >= 0, "Bad reveal budget")
    _require(len(set(raw_revealed)) + reveals_remaining <= LETTER_REVEALS_PER_PUZZLE,
             "Revealed letters exceed the reveal budget")

    clue = data.get('clue')
    _require(clue is None or isinstance(clue, str), "Bad clue")

    current_guess = data.get('current_guess')
    if not (isinstance(current_guess, list) and len(current_guess) == word_length
            and all(isinstance(c, str) and len(c) <= 1 for c in current_guess)):
        current_guess = []

    # A won game always shows the full solution
    if game_status is GameStatus.WON and len(locked_letters) < word_length:
        locked_letters = {i: letter for i, letter in enumerate(secret)}

    state = GameState(
        word_length=word_length,
        secret_word=secret,
        clue=clue,
        attempts=attempts,
        locked_letters=locked_letters,
        revealed_letters=set(raw_revealed),
        game_status=game_status,
        attempt_index=attempt_index,
        letter_reveals_remaining=reveals_remaining,
        current_guess=[c.upper() for c in current_guess],
    )
    for position, letter in locked_letters.items():
        state.current_guess[position] = letter
    return state


class PersistenceController:
    """Day-keyed save/restore of daily puzzles on top of a snapshot store."""

    def __init__(self, store):
        self.store = store

    def save(self, session: GameSession, current_day: str) -> bool:
        """
        Write a snapshot of the session.

        Random and archive games are never persisted. Store failures are
        logged and reported as False, never raised.
        """
        if not session.is_daily:
            return False

        payload = json.dumps(serialize_state(session.state, current_day, session.max_guesses))
        try:
            self.store.put(session.player_id, payload)
        except Exception as e:
            game_logger.log_game_event(
                session.player_id, 'snapshot_save_failed', level=logging.ERROR, error=str(e)
            )
            return False
        return True

    def load_snapshot(self, player_id: str, current_day: str) -> Optional[Dict[str, Any]]:
        """
        Read, validate and migrate the stored snapshot dict.

        Returns None when nothing usable is stored; stale or corrupt
        snapshots are deleted on the way.
        """
        try:
            raw = self.store.get(player_id)
        except Exception as e:
            game_logger.log_game_event(
                player_id, 'snapshot_read_failed', level=logging.ERROR, error=str(e)
            )
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            _require(isinstance(data, dict), "Snapshot must be an object")
        except (TypeError, ValueError) as e:
            self._discard(player_id, 'corrupt', str(e))
            return None

        if data.get('date') != current_day:
            self._discard(player_id, 'stale', f"snapshot from {data.get('date')!r}, today is {current_day}")
            return None

        try:
            data = migrate_snapshot(data)
            deserialize_state(data)
        except (TypeError, ValueError, AttributeError) as e:
            self._discard(player_id, 'corrupt', str(e))
            return None
        return data

    def restore(self, player_id: str, current_day: str) -> Optional[GameState]:
        """Return the saved state for today, or None. Never raises."""
        data = self.load_snapshot(player_id, current_day)
        if data is None:
            return None
        return deserialize_state(data)

    def clear(self, player_id: str) -> None:
        try:
            self.store.delete(player_id)
        except Exception as e:
            game_logger.log_game_event(
                player_id, 'snapshot_delete_failed', level=logging.ERROR, error=str(e)
            )

    def _discard(self, player_id: str, reason: str, detail: str) -> None:
        game_logger.log_game_event(
            player_id, 'snapshot_discarded', level=logging.WARNING, reason=reason, detail=detail
        )
        self.clear(player_id)


def build_snapshot_store(config):
    """Create the snapshot store selected by SNAPSHOT_BACKEND."""
    backend = getattr(config, 'SNAPSHOT_BACKEND', 'memory')
    if backend == 'mongo':
        if not config.MONGO_URI:
            raise ValueError("SNAPSHOT_BACKEND is 'mongo' but MONGO_URI is not configured")
        return MongoSnapshotStore(config.MONGO_URI, getattr(config, 'MONGO_DB_NAME', 'wordibble'))
    if backend == 'memory':
        return MemorySnapshotStore()
    raise ValueError(f"Unknown snapshot backend: {backend!r}")


# Global service instance
_persistence_controller = None


def get_persistence_controller() -> Optional[PersistenceController]:
    """Get the global persistence controller instance."""
    return _persistence_controller


def initialize_persistence_controller(store) -> PersistenceController:
    """Initialize the global persistence controller instance."""
    global _persistence_controller
    _persistence_controller = PersistenceController(store)
    return _persistence_controller
