from collections import Counter

import pytest

from wordibble.errors import LengthMismatchError
from wordibble.models.game import LetterStatus
from wordibble.services.evaluator import evaluate_guess, is_solved

C = LetterStatus.CORRECT
P = LetterStatus.PRESENT
A = LetterStatus.ABSENT


def test_exact_match_is_all_correct():
    assert evaluate_guess("CRANE", "CRANE") == [C, C, C, C, C]
    assert is_solved(evaluate_guess("JOURNEY", "JOURNEY"))


def test_mixed_feedback():
    assert evaluate_guess("SLATE", "CRANE") == [A, A, C, A, C]


def test_repeated_letter_not_over_counted():
    # SPEED has two Es; ERASE guesses two Es and neither is in place
    assert evaluate_guess("ERASE", "SPEED") == [P, A, A, P, P]
    # Three guessed Es, only two available
    assert evaluate_guess("EERIE", "SPEED") == [P, P, A, A, A]


def test_correct_match_consumes_before_present():
    # The T in position 3 is correct, so the leading T has nothing left to match
    assert evaluate_guess("TASTE", "SLATE") == [A, P, P, C, C]


def test_case_is_normalized():
    assert evaluate_guess("crane", "CRANE") == [C, C, C, C, C]
    assert evaluate_guess(" Slate ", "crane") == [A, A, C, A, C]


def test_length_mismatch_raises():
    with pytest.raises(LengthMismatchError):
        evaluate_guess("CRANES", "CRANE")


def test_is_solved_requires_every_position():
    assert not is_solved([C, C, P, C, C])
    assert not is_solved([])


@pytest.mark.parametrize("secret", ["SPEED", "BUNNY", "EERIE", "LEVEL", "ALLOW"])
def test_never_marks_more_letters_than_the_secret_holds(secret):
    words = ["SPEED", "ERASE", "EERIE", "BUNNY", "NANNY", "LEVEL", "LLAMA", "ALLOW", "EEEEE"]
    secret_counts = Counter(secret)
    for guess in words:
        evaluation = evaluate_guess(guess, secret)
        hits = Counter(letter for letter, status in zip(guess, evaluation) if status is not A)
        for letter, count in hits.items():
            assert count <= secret_counts[letter], (guess, secret, letter)
