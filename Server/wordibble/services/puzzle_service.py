"""
Puzzle Service

Supplies the daily (or random, or archived) puzzle for a word length and the
dictionary of valid guesses, from the bundled data files.
"""

import logging
import random
from typing import Dict, List, Optional, Set

from ..config.game_settings import (
    DEFAULT_PUZZLES, MISSING_CLUE, WORD_LENGTHS, load_clues, load_puzzle_index, load_word_list
)
from ..errors import DataLoadError, NoPuzzleAvailableError
from ..models.game import DailyPuzzle
from ..utils.game_logger import game_logger


class PuzzleService:
    """
    Read-only source of puzzles and dictionaries.

    Data files are read lazily and cached; a failed read is retried on the
    next call.
    """

    def __init__(self, data_dir: Optional[str] = None, rng: Optional[random.Random] = None):
        self.data_dir = data_dir
        self.rng = rng or random.Random()
        self._puzzles: Optional[Dict[int, List[Dict[str, str]]]] = None
        self._clues: Optional[Dict[str, str]] = None
        self._dictionaries: Dict[int, Set[str]] = {}

    def _puzzle_list(self, word_length: int) -> List[Dict[str, str]]:
        if self._puzzles is None:
            self._puzzles = load_puzzle_index(self.data_dir)
        return self._puzzles.get(word_length, [])

    def find_clue(self, word: str) -> str:
        """Case-agnostic clue lookup."""
        if self._clues is None:
            self._clues = load_clues(self.data_dir)
        return self._clues.get(word.upper(), MISSING_CLUE)

    def load_daily(self, word_length: int, random_mode: bool = False, today: Optional[str] = None) -> DailyPuzzle:
        """
        Return today's puzzle, or a random one in random mode.

        When no puzzle is dated today the first listed puzzle is used. If the
        data cannot be read at all, a hardcoded default puzzle is returned
        instead of failing.
        """
        try:
            puzzles = self._puzzle_list(word_length)
            if not puzzles:
                raise NoPuzzleAvailableError(f"No {word_length}-letter puzzles available")

            if random_mode:
                puzzle = self.rng.choice(puzzles)
            else:
                puzzle = next((p for p in puzzles if p['date'] == today), puzzles[0])

            return DailyPuzzle(
                word=puzzle['word'],
                clue=self.find_clue(puzzle['word']),
                is_today=not random_mode and puzzle['date'] == today,
                date=puzzle['date'],
            )
        except DataLoadError as e:
            game_logger.log_game_event(
                None, 'puzzle_fallback', level=logging.WARNING,
                word_length=word_length, reason=str(e)
            )
            word, clue = DEFAULT_PUZZLES[word_length]
            return DailyPuzzle(word=word, clue=clue, is_today=False, date=today)

    def load_by_date(self, puzzle_date: str, word_length: int, today: Optional[str] = None) -> DailyPuzzle:
        """
        Return the archived puzzle for a date.

        Raises:
            NoPuzzleAvailableError: if no puzzle exists for that date and length
        """
        puzzle = next((p for p in self._puzzle_list(word_length) if p['date'] == puzzle_date), None)
        if puzzle is None:
            raise NoPuzzleAvailableError(f"No puzzle available for date {puzzle_date}")

        return DailyPuzzle(
            word=puzzle['word'],
            clue=self.find_clue(puzzle['word']),
            is_today=puzzle_date == today,
            date=puzzle_date,
        )

    def load_dictionary(self, word_length: int) -> Set[str]:
        """Return the set of valid guesses for a word length."""
        if word_length not in WORD_LENGTHS:
            raise DataLoadError(f"Unsupported word length: {word_length}")
        if word_length not in self._dictionaries:
            words = set(load_word_list(word_length, self.data_dir))
            # The answer word is always a legal guess
            words.update(p['word'] for p in self._safe_puzzle_list(word_length))
            words.add(DEFAULT_PUZZLES[word_length][0])
            self._dictionaries[word_length] = words
        return self._dictionaries[word_length]

    def _safe_puzzle_list(self, word_length: int) -> List[Dict[str, str]]:
        try:
            return self._puzzle_list(word_length)
        except DataLoadError:
            return []


# Global service instance
_puzzle_service = None


def get_puzzle_service() -> Optional[PuzzleService]:
    """Get the global puzzle service instance."""
    return _puzzle_service


def initialize_puzzle_service(data_dir: Optional[str] = None, rng: Optional[random.Random] = None) -> PuzzleService:
    """Initialize the global puzzle service instance."""
    global _puzzle_service
    _puzzle_service = PuzzleService(data_dir, rng)
    return _puzzle_service
