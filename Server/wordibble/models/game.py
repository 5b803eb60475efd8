"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..config.game_settings import (
    WORD_LENGTHS, DEFAULT_WORD_LENGTH, MAX_GUESSES, LETTER_REVEALS_PER_PUZZLE,
    DEFAULT_REVEAL_VOWELS, DEFAULT_REVEAL_VOWEL_COUNT, DEFAULT_REVEAL_CLUE, DEFAULT_RANDOM_PUZZLE
)
from ..errors import InvalidSettingsError

_TRUE_STRINGS = ('true', '1', 'yes')
_FALSE_STRINGS = ('false', '0', 'no')


def _parse_flag(data: Dict[str, Any], key: str, default: bool) -> bool:
    """Read a JSON boolean, also accepting "true"/"false" strings."""
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise InvalidSettingsError(f"{key} must be true or false, got {value!r}")


class LetterStatus(Enum):
    """Per-position evaluation of a guessed letter."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class GameStatus(Enum):
    """Puzzle status. WON and LOST are terminal."""
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING


@dataclass
class GameSettings:
    """Player-chosen generation settings for a puzzle."""
    word_length: int = DEFAULT_WORD_LENGTH
    max_guesses: int = MAX_GUESSES
    reveal_vowels: bool = DEFAULT_REVEAL_VOWELS
    reveal_vowel_count: int = DEFAULT_REVEAL_VOWEL_COUNT
    reveal_clue: bool = DEFAULT_REVEAL_CLUE
    random_puzzle: bool = DEFAULT_RANDOM_PUZZLE

    def __post_init__(self):
        if self.word_length not in WORD_LENGTHS:
            raise InvalidSettingsError(f"Word length must be one of {list(WORD_LENGTHS)}")
        if self.max_guesses < 1:
            raise InvalidSettingsError("Max guesses must be at least 1")
        if self.reveal_vowel_count < 0:
            raise InvalidSettingsError("Vowel count cannot be negative")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'GameSettings':
        """Build settings from a JSON payload, ignoring unknown keys."""
        data = data or {}
        if not isinstance(data, dict):
            raise InvalidSettingsError("Settings must be an object")
        try:
            return cls(
                word_length=int(data.get('word_length', DEFAULT_WORD_LENGTH)),
                max_guesses=int(data.get('max_guesses', MAX_GUESSES)),
                reveal_vowels=_parse_flag(data, 'reveal_vowels', DEFAULT_REVEAL_VOWELS),
                reveal_vowel_count=int(data.get('reveal_vowel_count', DEFAULT_REVEAL_VOWEL_COUNT)),
                reveal_clue=_parse_flag(data, 'reveal_clue', DEFAULT_REVEAL_CLUE),
                random_puzzle=_parse_flag(data, 'random_puzzle', DEFAULT_RANDOM_PUZZLE),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, InvalidSettingsError):
                raise
            raise InvalidSettingsError(f"Invalid settings: {e}")

    def mode_flags(self) -> Dict[str, Any]:
        return {
            'reveal_vowels': self.reveal_vowels,
            'vowel_count': self.reveal_vowel_count,
            'reveal_clue': self.reveal_clue,
            'random_puzzle': self.random_puzzle,
        }


@dataclass
class DailyPuzzle:
    """A puzzle as supplied by the puzzle source."""
    word: str
    clue: Optional[str]
    is_today: bool
    date: Optional[str] = None


@dataclass
class GameState:
    """
    Authoritative engine state for one puzzle.

    attempt_index always equals len(attempts). locked_letters only ever gains
    positions and revealed_letters only grows through the lifeline budget.
    """
    word_length: int
    secret_word: str
    clue: Optional[str] = None
    attempts: List[str] = field(default_factory=list)
    locked_letters: Dict[int, str] = field(default_factory=dict)
    revealed_letters: Set[int] = field(default_factory=set)
    game_status: GameStatus = GameStatus.PLAYING
    attempt_index: int = 0
    letter_reveals_remaining: int = LETTER_REVEALS_PER_PUZZLE
    current_guess: List[str] = field(default_factory=list)

    def __post_init__(self):
        if len(self.current_guess) != self.word_length:
            self.current_guess = self.base_guess_row()

    def lock_position(self, position: int, letter: str) -> bool:
        """
        Lock a position to a letter.

        Returns True when the position was newly locked. Locking an already
        locked position with the same letter is a no-op.

        Raises:
            ValueError: if the position is already locked to another letter
        """
        existing = self.locked_letters.get(position)
        if existing == letter:
            return False
        if existing is not None:
            raise ValueError(f"Position {position} is locked to '{existing}', not '{letter}'")
        self.locked_letters[position] = letter
        return True

    def base_guess_row(self) -> List[str]:
        """Input row holding only the locked and lifeline letters."""
        row = [self.locked_letters.get(i, '') for i in range(self.word_length)]
        for position in self.revealed_letters:
            if 0 <= position < self.word_length and not row[position]:
                row[position] = self.secret_word[position]
        return row

    def is_editable(self, position: int) -> bool:
        return position not in self.locked_letters and position not in self.revealed_letters

    @property
    def is_over(self) -> bool:
        return self.game_status.is_terminal


@dataclass
class GameSession:
    """A player's live puzzle: engine state plus everything loaded with it."""
    player_id: str
    settings: GameSettings
    state: GameState
    dictionary: Set[str]
    max_guesses: int
    puzzle_date: str
    is_today: bool = True
    is_archive: bool = False
    restored: bool = False
    error: Optional[str] = None  # transient, cleared by the next action
    last_active: Optional[str] = None  # puzzle date of the latest operation

    @property
    def is_daily(self) -> bool:
        """Daily games are the only ones persisted, shared and recorded."""
        return not self.settings.random_puzzle and not self.is_archive

    @property
    def attempts_left(self) -> int:
        return max(self.max_guesses - self.state.attempt_index, 0)


@dataclass
class GuessResult:
    """Outcome of one accepted guess."""
    guess: str
    evaluation: List[LetterStatus]
    game_status: GameStatus
    attempt_index: int
    newly_locked: List[int]
    timeline: Dict[str, Any]
