import json
import random
from datetime import datetime, timezone

import pytest

from wordibble.config.game_settings import (
    WORD_LENGTHS, get_word_statistics, load_clues, load_puzzle_index, load_word_list,
    validate_word_list_integrity
)
from wordibble.errors import DataLoadError, NoPuzzleAvailableError
from wordibble.services.puzzle_service import PuzzleService
from wordibble.utils.helpers import get_puzzle_date, get_puzzle_number


@pytest.mark.parametrize("length", WORD_LENGTHS)
def test_bundled_data_is_consistent(length):
    words = load_word_list(length)
    assert validate_word_list_integrity(words, length)

    puzzles = load_puzzle_index()[length]
    assert puzzles
    dates = [p["date"] for p in puzzles]
    assert len(dates) == len(set(dates))

    clues = load_clues()
    for puzzle in puzzles:
        assert puzzle["word"] in clues


def test_word_list_validation():
    with pytest.raises(ValueError):
        validate_word_list_integrity([], 5)
    with pytest.raises(ValueError):
        validate_word_list_integrity(["CRANE", "CRANE"], 5)
    with pytest.raises(ValueError):
        validate_word_list_integrity(["CRANES"], 5)
    with pytest.raises(ValueError):
        validate_word_list_integrity(["crane"], 5)


def test_word_statistics():
    stats = get_word_statistics(["CRANE", "AUDIO"])
    assert stats["total_words"] == 2
    assert stats["avg_vowel_count"] == 3.0
    assert stats["letter_frequency"]["A"] == 2


class TestPuzzleService:

    @pytest.fixture
    def service(self):
        return PuzzleService(rng=random.Random(7))

    def test_todays_puzzle(self, service):
        puzzle = service.load_daily(5, today="2025-09-02")
        assert puzzle.word == "BUNNY"
        assert puzzle.is_today
        assert puzzle.clue

    def test_falls_back_to_the_first_puzzle(self, service):
        puzzle = service.load_daily(6, today="2030-01-01")
        assert puzzle.word == "PLANET"
        assert not puzzle.is_today

    def test_random_mode_is_never_today(self, service):
        puzzle = service.load_daily(7, random_mode=True, today="2025-09-01")
        assert len(puzzle.word) == 7
        assert not puzzle.is_today

    def test_clue_lookup_ignores_case(self, service):
        assert service.find_clue("crane") == service.find_clue("CRANE")
        assert service.find_clue("ZZZZZ") == "I literally have no clue"

    def test_archive_lookup(self, service):
        assert service.load_by_date("2025-09-03", 5, today="2025-09-10").word == "SPEED"
        with pytest.raises(NoPuzzleAvailableError):
            service.load_by_date("2024-01-01", 7)

    def test_dictionary_contains_every_answer(self, service):
        dictionary = service.load_dictionary(5)
        assert "CRANE" in dictionary
        assert "HELLO" in dictionary
        assert all(p["word"] in dictionary for p in load_puzzle_index()[5])

    def test_missing_data_uses_the_default_puzzle(self, tmp_path):
        service = PuzzleService(data_dir=str(tmp_path))
        puzzle = service.load_daily(5, today="2025-09-01")
        assert puzzle.word == "HELLO"
        assert puzzle.clue == "A friendly greeting"
        assert not puzzle.is_today

        with pytest.raises(DataLoadError):
            service.load_dictionary(5)

    def test_malformed_puzzle_index_uses_the_default_puzzle(self, tmp_path):
        (tmp_path / "puzzles.json").write_text(
            json.dumps({"five": [{"date": "2025-09-01", "word": "crane"}]}), encoding="utf-8"
        )
        with pytest.raises(DataLoadError):
            load_puzzle_index(str(tmp_path))

        puzzle = PuzzleService(data_dir=str(tmp_path)).load_daily(5, today="2025-09-01")
        assert puzzle.word == "HELLO"
        assert not puzzle.is_today


class TestPuzzleDate:

    def test_rollover_follows_the_puzzle_timezone(self):
        # 03:00 UTC is still the previous evening in New York
        late_evening = datetime(2025, 9, 2, 3, 0, tzinfo=timezone.utc)
        assert get_puzzle_date(late_evening) == "2025-09-01"
        assert get_puzzle_date(late_evening, "UTC") == "2025-09-02"

    def test_naive_times_are_local_to_the_puzzle(self):
        assert get_puzzle_date(datetime(2025, 9, 1, 23, 59)) == "2025-09-01"

    def test_puzzle_numbers(self):
        assert get_puzzle_number("2025-08-23") == 1
        assert get_puzzle_number("2025-09-01") == 10
