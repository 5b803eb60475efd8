"""
Game Configuration Constants Module

This module defines all game configuration constants and the loaders for the
bundled puzzle data (daily puzzles, clues and per-length dictionaries).
All game parameters are centralized here to enable easy modification.
"""

import json
import os
from datetime import date
from typing import Dict, Final, List, Optional, Tuple

from ..errors import DataLoadError

# Core Game Configuration Constants
WORD_LENGTHS: Final[Tuple[int, ...]] = (5, 6, 7)
DEFAULT_WORD_LENGTH: Final[int] = 5

MAX_GUESSES: Final[int] = 6
"""
Default number of guess attempts allowed per puzzle.
Type: Final[int] - Immutable to prevent accidental modification
"""

MIN_ADJUSTED_GUESSES: Final[int] = 3
"""Floor applied by the reveal-adjusted max-guesses policy."""

LETTER_REVEALS_PER_PUZZLE: Final[int] = 1
"""Lifeline budget. Never replenished within a puzzle."""

DEFAULT_REVEAL_VOWELS: Final[bool] = False
DEFAULT_REVEAL_VOWEL_COUNT: Final[int] = 1
DEFAULT_REVEAL_CLUE: Final[bool] = True
DEFAULT_RANDOM_PUZZLE: Final[bool] = False

VOWELS: Final[frozenset] = frozenset('AEIOU')

# Served when the daily puzzle data cannot be read
DEFAULT_PUZZLES: Final[Dict[int, Tuple[str, str]]] = {
    5: ('HELLO', 'A friendly greeting'),
    6: ('GREETS', 'Says hello'),
    7: ('WELCOME', 'A warm reception'),
}
MISSING_CLUE: Final[str] = 'I literally have no clue'

# Puzzle #1 was published on this day
PUZZLE_EPOCH: Final[date] = date(2025, 8, 23)
SHARE_TITLE: Final[str] = 'Wordibble'

# Presentation timeline (tile flip sequencing)
FLIP_STAGGER_MS: Final[int] = 100
FLIP_DURATION_MS: Final[int] = 600

SNAPSHOT_VERSION: Final[int] = 2

# Live sessions untouched for longer than this are dropped from memory
SESSION_RETENTION_DAYS: Final[int] = 1

# Finished results kept per player by the stats recorder
MAX_RESULTS_PER_PLAYER: Final[int] = 366

DATA_DIR: Final[str] = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data'
)


def _data_path(filename: str, data_dir: Optional[str] = None) -> str:
    return os.path.join(data_dir or DATA_DIR, filename)


def _read_json(path: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        raise DataLoadError(f"Data file not found: {path}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in {os.path.basename(path)}: {e}")


def load_word_list(word_length: int, data_dir: Optional[str] = None) -> List[str]:
    """
    Load the dictionary of valid guesses for one word length.

    Returns:
        List[str]: List of uppercase words of the requested length

    Raises:
        DataLoadError: If the file is missing, empty or contains invalid words
    """
    path = _data_path(f'words_{word_length}.txt', data_dir)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            words = [line.strip().upper() for line in f if line.strip()]
    except FileNotFoundError:
        raise DataLoadError(f"Word list file not found: {path}")

    try:
        validate_word_list_integrity(words, word_length)
    except ValueError as e:
        raise DataLoadError(str(e))
    return words


def load_puzzle_index(data_dir: Optional[str] = None) -> Dict[int, List[Dict[str, str]]]:
    """
    Load the dated puzzle list for every word length.

    The file maps a word length to a list of {"date": "YYYY-MM-DD", "word": ...}.
    """
    raw = _read_json(_data_path('puzzles.json', data_dir))
    if not isinstance(raw, dict):
        raise DataLoadError("puzzles.json must contain an object keyed by word length")

    index: Dict[int, List[Dict[str, str]]] = {}
    for length_key, entries in raw.items():
        if not isinstance(entries, list):
            raise DataLoadError(f"Puzzle list for length {length_key} must be an array")
        try:
            length = int(length_key)
        except (TypeError, ValueError):
            raise DataLoadError(f"Puzzle length key {length_key!r} is not a number")
        puzzles = []
        for entry in entries:
            if not isinstance(entry, dict) or 'date' not in entry or 'word' not in entry:
                raise DataLoadError(f"Malformed puzzle entry: {entry!r}")
            word = str(entry['word']).strip().upper()
            if len(word) != length or not word.isalpha():
                raise DataLoadError(f"Puzzle word '{word}' does not have {length} letters")
            puzzles.append({'date': str(entry['date']), 'word': word})
        index[length] = puzzles
    return index


def load_clues(data_dir: Optional[str] = None) -> Dict[str, str]:
    """Load the clue table, keyed by uppercase word."""
    raw = _read_json(_data_path('clues.json', data_dir))
    if not isinstance(raw, dict):
        raise DataLoadError("clues.json must contain an object")
    return {str(word).strip().upper(): str(clue) for word, clue in raw.items()}


def validate_word_list_integrity(words: List[str], word_length: int) -> bool:
    """
    Validates the integrity and consistency of a word list.

    Checks that every word has the expected length, is purely alphabetic,
    uppercase, and that the list has no duplicates.

    Raises:
        ValueError: If any validation check fails with detailed error message
    """
    if not words:
        raise ValueError(f"Word list for length {word_length} cannot be empty")

    for index, word in enumerate(words):
        if len(word) != word_length:
            raise ValueError(f"Word at index {index} '{word}' is not {word_length} characters long")
        if not word.isalpha():
            raise ValueError(f"Word at index {index} '{word}' contains non-alphabetic characters")
        if not word.isupper():
            raise ValueError(f"Word at index {index} '{word}' is not in uppercase format")

    if len(words) != len(set(words)):
        seen = set()
        duplicates = sorted({word for word in words if word in seen or seen.add(word)})
        raise ValueError(f"Duplicate words found in word list: {duplicates}")

    return True


def get_word_statistics(words: List[str]) -> dict:
    """Analyzes a word list and returns statistical information for game balancing."""
    if not words:
        return {"error": "Word list is empty"}

    total_vowels = sum(len([char for char in word if char in VOWELS]) for word in words)

    letter_frequency: Dict[str, int] = {}
    for word in words:
        for char in word:
            letter_frequency[char] = letter_frequency.get(char, 0) + 1

    return {
        "total_words": len(words),
        "avg_vowel_count": round(total_vowels / len(words), 2),
        "letter_frequency": letter_frequency,
        "most_common_letters": sorted(letter_frequency.items(), key=lambda x: x[1], reverse=True)[:5]
    }


if __name__ == "__main__":

    try:
        for length in WORD_LENGTHS:
            stats = get_word_statistics(load_word_list(length))
            print(f" {length}-letter words: {stats['total_words']} (avg vowels {stats['avg_vowel_count']})")
        load_puzzle_index()
        load_clues()
        print(" All data validation checks passed")
    except DataLoadError as data_error:
        print(f" Data validation failed: {data_error}")
        exit(1)
