"""
Game Service

Contains the core puzzle engine: loading a player's puzzle (fresh or
restored), guess submission and the playing -> won/lost state machine, the
letter lifeline, and the derived views (keyboard, share grid).
"""

import random
import threading
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..config.app_config import Config
from ..config.game_settings import MIN_ADJUSTED_GUESSES, SESSION_RETENTION_DAYS, SHARE_TITLE
from ..errors import (
    GameOverError, IncompleteGuessError, NotInDictionaryError, SessionNotFoundError,
    ShareUnavailableError
)
from ..models.game import GameSession, GameSettings, GameState, GameStatus, GuessResult, LetterStatus
from ..utils.game_logger import game_logger
from ..utils.helpers import get_puzzle_date, get_puzzle_number
from .evaluator import evaluate_guess, is_solved
from .keyboard import aggregate_keyboard
from .persistence_service import (
    PersistenceController, build_snapshot_store, deserialize_state, initialize_persistence_controller
)
from .puzzle_service import PuzzleService, initialize_puzzle_service
from .reveal_service import compute_initial_locks, request_lifeline_reveal
from .stats_service import GameResult, StatsService, initialize_stats_service
from .timeline import build_flip_timeline

SHARE_SQUARES = {
    LetterStatus.CORRECT: '\U0001F7E9',
    LetterStatus.PRESENT: '\U0001F7E8',
    LetterStatus.ABSENT: '⬛',
}


def fixed_max_guesses(settings: GameSettings, initial_locked_count: int) -> int:
    return settings.max_guesses


def reveal_adjusted_max_guesses(settings: GameSettings, initial_locked_count: int) -> int:
    """
    Trade guesses against help: one extra guess when there is no clue and a
    single pre-revealed letter, two fewer (never below the floor) when a clue
    is shown alongside two or more pre-revealed letters.
    """
    if not settings.reveal_clue and initial_locked_count == 1:
        return settings.max_guesses + 1
    if settings.reveal_clue and initial_locked_count >= 2:
        return max(MIN_ADJUSTED_GUESSES, settings.max_guesses - 2)
    return settings.max_guesses


MAX_GUESSES_POLICIES: Dict[str, Callable[[GameSettings, int], int]] = {
    'fixed': fixed_max_guesses,
    'reveal_adjusted': reveal_adjusted_max_guesses,
}


def _is_letter(value: str) -> bool:
    return len(value) == 1 and 'A' <= value <= 'Z'


def _is_guess_input(guess: Any) -> bool:
    """A word, or a row of cells that are each a string or empty (None)."""
    if isinstance(guess, str):
        return True
    return isinstance(guess, (list, tuple)) and all(c is None or isinstance(c, str) for c in guess)


class GameService:
    """
    Core game service managing one live puzzle per player.

    This class handles:
    - Puzzle loading, with same-day restore of daily puzzles
    - Guess validation, evaluation and the win/loss transition
    - Locked letters and the one-time letter lifeline
    - Snapshot and stats side effects of every transition

    Every public operation runs under a single lock, so transitions for a
    player are applied one at a time in arrival order.
    """

    def __init__(self,
                 puzzle_service: PuzzleService,
                 persistence: PersistenceController,
                 stats_service: Optional[StatsService] = None,
                 timezone_name: str = 'America/New_York',
                 max_guesses_policy: str = 'fixed',
                 vowel_reveal_policy: str = 'leftmost',
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        if max_guesses_policy not in MAX_GUESSES_POLICIES:
            raise ValueError(f"Unknown max guesses policy: {max_guesses_policy!r}")

        self.puzzle_service = puzzle_service
        self.persistence = persistence
        self.stats_service = stats_service
        self.timezone_name = timezone_name
        self.max_guesses_policy = MAX_GUESSES_POLICIES[max_guesses_policy]
        self.vowel_reveal_policy = vowel_reveal_policy
        self.rng = rng or random.Random()
        self.clock = clock
        self.sessions: Dict[str, GameSession] = {}
        self._lock = threading.RLock()

    def today(self) -> str:
        """Today's puzzle date in the puzzle timezone."""
        return get_puzzle_date(self.clock() if self.clock else None, self.timezone_name)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_game(self,
                  player_id: str,
                  settings: Optional[GameSettings] = None,
                  archive_date: Optional[str] = None) -> GameSession:
        """
        Load the player's puzzle.

        Daily puzzles resume from today's snapshot when one exists. Changing
        the word length or the random-puzzle mode discards the snapshot.

        Args:
            player_id: Opaque client identifier
            settings: Generation settings; defaults to the player's current ones
            archive_date: Load the puzzle of this date instead (never persisted)

        Raises:
            NoPuzzleAvailableError: if the archive date has no puzzle
            DataLoadError: if the dictionary cannot be loaded
        """
        if not player_id:
            raise ValueError("player_id is required")

        with self._lock:
            self.evict_idle_sessions()
            previous = self.sessions.get(player_id)
            if settings is None:
                settings = previous.settings if previous else GameSettings()

            if previous is not None and previous.is_daily and (
                    previous.settings.word_length != settings.word_length
                    or previous.settings.random_puzzle != settings.random_puzzle):
                self.persistence.clear(player_id)
                game_logger.log_game_event(player_id, 'settings_changed', **settings.mode_flags(),
                                           word_length=settings.word_length)

            return self._load(player_id, settings, archive_date)

    def _load(self, player_id: str, settings: GameSettings, archive_date: Optional[str] = None) -> GameSession:
        today = self.today()
        if archive_date:
            puzzle = self.puzzle_service.load_by_date(archive_date, settings.word_length, today)
        else:
            puzzle = self.puzzle_service.load_daily(settings.word_length, settings.random_puzzle, today)
        dictionary = self.puzzle_service.load_dictionary(settings.word_length)

        initial_locks = compute_initial_locks(
            puzzle.word, settings.reveal_vowels, settings.reveal_vowel_count,
            self.vowel_reveal_policy, self.rng
        )
        state = GameState(
            word_length=settings.word_length,
            secret_word=puzzle.word,
            clue=puzzle.clue if settings.reveal_clue else None,
            locked_letters=dict(initial_locks),
        )
        session = GameSession(
            player_id=player_id,
            settings=settings,
            state=state,
            dictionary=dictionary,
            max_guesses=self.max_guesses_policy(settings, len(initial_locks)),
            puzzle_date=archive_date or today,
            is_today=puzzle.is_today,
            is_archive=bool(archive_date),
            last_active=today,
        )

        if session.is_daily:
            self._restore_into(session, today)
            self.persistence.save(session, today)

        self.sessions[player_id] = session
        game_logger.log_game_event(
            player_id, 'game_restored' if session.restored else 'game_loaded',
            puzzle_date=session.puzzle_date, word_length=settings.word_length,
            archive=session.is_archive, random_puzzle=settings.random_puzzle,
            locked=len(state.locked_letters), max_guesses=session.max_guesses
        )
        return session

    def _restore_into(self, session: GameSession, today: str) -> bool:
        """Replace the fresh state with today's snapshot when it matches this puzzle."""
        data = self.persistence.load_snapshot(session.player_id, today)
        if data is None:
            return False

        restored = deserialize_state(data)
        if (restored.word_length != session.settings.word_length
                or restored.secret_word != session.state.secret_word):
            game_logger.log_game_event(session.player_id, 'snapshot_discarded', reason='puzzle_changed')
            self.persistence.clear(session.player_id)
            return False

        # The clue follows the current settings, not the saved ones
        restored.clue = session.state.clue
        saved_max = data.get('max_guesses')
        if isinstance(saved_max, int) and saved_max >= 1:
            session.max_guesses = saved_max

        session.state = restored
        session.restored = True
        return True

    def _live_session(self, player_id: str) -> GameSession:
        """The player's session, reloaded first if the daily puzzle rolled over."""
        session = self.sessions.get(player_id)
        if session is None:
            raise SessionNotFoundError(f"No game loaded for player {player_id!r}")

        if session.is_daily and session.puzzle_date != self.today():
            game_logger.log_game_event(player_id, 'daily_rollover', previous_date=session.puzzle_date)
            session = self._load(player_id, session.settings)
        session.last_active = self.today()
        return session

    def evict_idle_sessions(self) -> int:
        """
        Drop live sessions nobody has touched within the retention window.

        Daily progress survives in the snapshot store; an evicted player
        simply loads again. Returns the number of sessions dropped.
        """
        with self._lock:
            cutoff = (date.fromisoformat(self.today()) - timedelta(days=SESSION_RETENTION_DAYS)).isoformat()
            idle = [
                player_id for player_id, session in self.sessions.items()
                if session.last_active is None or session.last_active < cutoff
            ]
            for player_id in idle:
                del self.sessions[player_id]
            if idle:
                game_logger.log_game_event(None, 'sessions_evicted', count=len(idle), cutoff=cutoff)
            return len(idle)

    def get_session(self, player_id: str) -> GameSession:
        with self._lock:
            return self._live_session(player_id)

    def reset_game(self, player_id: str) -> GameSession:
        """Discard the saved state and start the same puzzle from scratch."""
        with self._lock:
            session = self._live_session(player_id)
            self.persistence.clear(player_id)
            game_logger.log_game_event(player_id, 'game_reset', puzzle_date=session.puzzle_date)
            return self._load(player_id, session.settings,
                              session.puzzle_date if session.is_archive else None)

    # ------------------------------------------------------------------
    # Guess submission
    # ------------------------------------------------------------------

    def build_complete_guess(self, state: GameState, typed: Sequence[str]) -> List[str]:
        """
        Overlay typed letters onto the locked positions.

        A locked letter always wins at its position. A lifeline position left
        empty takes the revealed letter.
        """
        letters = []
        for i in range(state.word_length):
            if i in state.locked_letters:
                letters.append(state.locked_letters[i])
                continue
            letter = typed[i] if i < len(typed) and typed[i] is not None else ''
            if not isinstance(letter, str):
                raise IncompleteGuessError()
            letter = letter.strip().upper()
            if not letter and i in state.revealed_letters:
                letter = state.secret_word[i]
            letters.append(letter)
        return letters

    def submit_guess(self, player_id: str, guess: Optional[Union[str, Sequence[str]]] = None) -> GuessResult:
        """
        Submit a guess, or the player's current input row when guess is None.

        Raises:
            GameOverError: if the puzzle is already won or lost
            IncompleteGuessError: if a position is empty; nothing is recorded
            NotInDictionaryError: if the word is not valid; nothing is recorded
        """
        with self._lock:
            session = self._live_session(player_id)
            state = session.state
            today = self.today()

            if state.is_over:
                raise GameOverError()

            session.error = None
            if guess is not None and not _is_guess_input(guess):
                error = IncompleteGuessError()
                session.error = str(error)
                raise error
            typed = list(guess) if guess is not None else list(state.current_guess)

            if len(typed) > state.word_length:
                session.error = f"Guess must be {state.word_length} letters"
                raise IncompleteGuessError(session.error)

            letters = self.build_complete_guess(state, typed)
            if not all(_is_letter(letter) for letter in letters):
                error = IncompleteGuessError()
                session.error = str(error)
                raise error

            word = ''.join(letters)
            if word not in session.dictionary:
                error = NotInDictionaryError()
                session.error = str(error)
                state.current_guess = state.base_guess_row()
                self.persistence.save(session, today)
                raise error

            evaluation = evaluate_guess(word, state.secret_word)

            state.attempts.append(word)
            state.attempt_index += 1

            newly_locked = [
                i for i, status in enumerate(evaluation)
                if status is LetterStatus.CORRECT and state.lock_position(i, word[i])
            ]

            if is_solved(evaluation):
                state.game_status = GameStatus.WON
            elif state.attempt_index >= session.max_guesses:
                state.game_status = GameStatus.LOST

            state.current_guess = state.base_guess_row()
            self.persistence.save(session, today)

            if state.is_over:
                self._finish(session)

            return GuessResult(
                guess=word,
                evaluation=evaluation,
                game_status=state.game_status,
                attempt_index=state.attempt_index,
                newly_locked=newly_locked,
                timeline=build_flip_timeline(evaluation),
            )

    def _finish(self, session: GameSession) -> None:
        state = session.state
        won = state.game_status is GameStatus.WON
        game_logger.log_game_event(
            session.player_id, 'game_won' if won else 'game_lost',
            attempts_used=state.attempt_index, max_guesses=session.max_guesses,
            target_word=state.secret_word, puzzle_date=session.puzzle_date
        )

        if self.stats_service is not None and session.is_daily:
            self.stats_service.record_result(session.player_id, GameResult(
                date=session.puzzle_date,
                word_length=state.word_length,
                won=won,
                guess_count=state.attempt_index if won else session.max_guesses,
                solution=state.secret_word,
                mode_flags=session.settings.mode_flags(),
            ))

    # ------------------------------------------------------------------
    # Input row editing and the lifeline
    # ------------------------------------------------------------------

    def type_letter(self, player_id: str, letter: str) -> GameSession:
        """Put a letter into the first empty editable cell."""
        if not isinstance(letter, str) or not _is_letter(letter.strip().upper()):
            raise ValueError("Letter must be a single A-Z character")

        with self._lock:
            session = self._live_session(player_id)
            state = session.state
            if state.is_over:
                return session

            session.error = None
            for i in range(state.word_length):
                if state.is_editable(i) and not state.current_guess[i]:
                    state.current_guess[i] = letter.strip().upper()
                    self.persistence.save(session, self.today())
                    break
            return session

    def delete_letter(self, player_id: str) -> GameSession:
        """Clear the last filled editable cell."""
        with self._lock:
            session = self._live_session(player_id)
            state = session.state
            if state.is_over:
                return session

            session.error = None
            for i in reversed(range(state.word_length)):
                if state.is_editable(i) and state.current_guess[i]:
                    state.current_guess[i] = ''
                    self.persistence.save(session, self.today())
                    break
            return session

    def reveal_letter(self, player_id: str) -> Optional[int]:
        """
        Spend the lifeline on a random unlocked position.

        Returns the revealed position, or None if nothing was revealed.
        """
        with self._lock:
            session = self._live_session(player_id)
            state = session.state
            position = request_lifeline_reveal(state, self.rng)
            if position is None:
                return None

            session.error = None
            state.current_guess[position] = state.secret_word[position]
            self.persistence.save(session, self.today())
            game_logger.log_game_event(
                player_id, 'letter_revealed', position=position,
                reveals_remaining=state.letter_reveals_remaining
            )
            return position

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def keyboard_state(self, player_id: str) -> Dict[str, str]:
        with self._lock:
            state = self._live_session(player_id).state
            return self._keyboard(state)

    def _keyboard(self, state: GameState) -> Dict[str, str]:
        states = aggregate_keyboard(
            state.locked_letters, state.revealed_letters, state.secret_word, state.attempts
        )
        return {letter: status.value for letter, status in sorted(states.items())}

    def share_text(self, player_id: str) -> str:
        """
        Emoji grid of the attempts, for daily puzzles only.

        Raises:
            ShareUnavailableError: for random or archive puzzles
        """
        with self._lock:
            session = self._live_session(player_id)
            if not session.is_daily:
                raise ShareUnavailableError("Sharing is only available for daily puzzles")

            state = session.state
            score = 'X' if state.game_status is GameStatus.LOST else state.attempt_index
            lines = [
                f"{SHARE_TITLE} #{get_puzzle_number(session.puzzle_date)} {score}/{session.max_guesses}",
                ''
            ]
            for attempt in state.attempts:
                lines.append(''.join(SHARE_SQUARES[s] for s in evaluate_guess(attempt, state.secret_word)))
            return '\n'.join(lines)

    def session_view(self, session: GameSession) -> Dict[str, Any]:
        """
        Public view of a session. The answer is only included once the
        game is over.
        """
        state = session.state
        return {
            'player_id': session.player_id,
            'word_length': state.word_length,
            'clue': state.clue,
            'attempts': list(state.attempts),
            'evaluations': [
                [s.value for s in evaluate_guess(attempt, state.secret_word)]
                for attempt in state.attempts
            ],
            'locked_letters': {str(pos): letter for pos, letter in sorted(state.locked_letters.items())},
            'revealed_letters': {
                str(pos): state.secret_word[pos] for pos in sorted(state.revealed_letters)
            },
            'game_status': state.game_status.value,
            'attempt_index': state.attempt_index,
            'max_guesses': session.max_guesses,
            'attempts_left': session.attempts_left,
            'letter_reveals_remaining': state.letter_reveals_remaining,
            'current_guess': list(state.current_guess),
            'puzzle_date': session.puzzle_date,
            'is_today': session.is_today,
            'is_archive': session.is_archive,
            'random_puzzle': session.settings.random_puzzle,
            'restored': session.restored,
            'error': session.error,
            'answer': state.secret_word if state.is_over else None,
            'keyboard': self._keyboard(state),
        }


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(config_class=Config,
                            store=None,
                            rng: Optional[random.Random] = None,
                            clock: Optional[Callable[[], datetime]] = None) -> GameService:
    """Initialize the global game service and the services it depends on."""
    global _game_service
    puzzle_service = initialize_puzzle_service(getattr(config_class, 'DATA_DIR', None), rng)
    persistence = initialize_persistence_controller(
        store if store is not None else build_snapshot_store(config_class)
    )
    stats_service = initialize_stats_service()
    _game_service = GameService(
        puzzle_service,
        persistence,
        stats_service,
        timezone_name=config_class.PUZZLE_TIMEZONE,
        max_guesses_policy=config_class.MAX_GUESSES_POLICY,
        vowel_reveal_policy=config_class.VOWEL_REVEAL_POLICY,
        rng=rng,
        clock=clock,
    )
    return _game_service
