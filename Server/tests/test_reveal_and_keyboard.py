import random

import pytest

from wordibble.models.game import GameState, GameStatus, LetterStatus
from wordibble.services.keyboard import aggregate_keyboard
from wordibble.services.reveal_service import (
    compute_initial_locks, eligible_reveal_positions, request_lifeline_reveal
)


class TestInitialLocks:

    def test_nothing_locked_without_vowel_reveal(self):
        assert compute_initial_locks("AUDIO", reveal_vowels=False, vowel_count=3) == {}
        assert compute_initial_locks("AUDIO", reveal_vowels=True, vowel_count=0) == {}

    def test_leftmost_policy_locks_first_vowels(self):
        assert compute_initial_locks("AUDIO", True, 2) == {0: "A", 1: "U"}
        # Same answer on every call
        assert compute_initial_locks("audio", True, 2) == compute_initial_locks("AUDIO", True, 2)

    def test_count_is_capped_by_available_vowels(self):
        assert compute_initial_locks("GHOST", True, 3) == {2: "O"}

    def test_random_policy_picks_vowel_positions(self):
        locks = compute_initial_locks("AUDIO", True, 2, policy="random", rng=random.Random(3))
        assert len(locks) == 2
        for position, letter in locks.items():
            assert "AUDIO"[position] == letter
            assert letter in "AEIOU"

    def test_unknown_policy_is_rejected(self):
        with pytest.raises(ValueError):
            compute_initial_locks("AUDIO", True, 1, policy="middle")


class TestLifeline:

    def make_state(self, **kwargs):
        return GameState(word_length=5, secret_word="CRANE", **kwargs)

    def test_reveals_an_unlocked_position_once(self):
        state = self.make_state(locked_letters={0: "C"})
        position = request_lifeline_reveal(state, random.Random(1))

        assert position in {1, 2, 3, 4}
        assert state.revealed_letters == {position}
        assert state.letter_reveals_remaining == 0

        # Budget exhausted: nothing else changes
        assert request_lifeline_reveal(state, random.Random(1)) is None
        assert state.revealed_letters == {position}
        assert state.letter_reveals_remaining == 0

    def test_no_reveal_after_the_game_ends(self):
        state = self.make_state(game_status=GameStatus.LOST)
        assert request_lifeline_reveal(state) is None
        assert state.letter_reveals_remaining == 1

    def test_no_reveal_when_every_position_is_locked(self):
        state = self.make_state(locked_letters=dict(enumerate("CRANE")))
        assert eligible_reveal_positions(state) == []
        assert request_lifeline_reveal(state) is None
        assert state.letter_reveals_remaining == 1


class TestKeyboard:

    def test_history_is_folded_in(self):
        states = aggregate_keyboard({}, set(), "CRANE", ["SLATE"])
        assert states == {
            "S": LetterStatus.ABSENT,
            "L": LetterStatus.ABSENT,
            "A": LetterStatus.CORRECT,
            "T": LetterStatus.ABSENT,
            "E": LetterStatus.CORRECT,
        }

    def test_locked_and_revealed_letters_start_correct(self):
        states = aggregate_keyboard({0: "C"}, {3}, "CRANE", [])
        assert states == {"C": LetterStatus.CORRECT, "N": LetterStatus.CORRECT}

    def test_status_is_never_downgraded(self):
        # ERASE scores its first E absent and its last E correct
        states = aggregate_keyboard({}, set(), "CRANE", ["ERASE"])
        assert states["E"] is LetterStatus.CORRECT

        # A locked letter stays correct even when a guess misplaces it
        states = aggregate_keyboard({1: "R"}, set(), "CRANE", ["RACES"])
        assert states["R"] is LetterStatus.CORRECT

    def test_attempt_order_does_not_matter(self):
        forward = aggregate_keyboard({}, set(), "CRANE", ["RACES", "CRANE"])
        backward = aggregate_keyboard({}, set(), "CRANE", ["CRANE", "RACES"])
        assert forward == backward
        assert forward["R"] is LetterStatus.CORRECT
        assert forward["S"] is LetterStatus.ABSENT
