"""
Guess Evaluator

Implements the Wordle letter evaluation algorithm for any word length.
"""

from collections import Counter
from typing import List, Optional, Sequence

from ..errors import LengthMismatchError
from ..models.game import LetterStatus


def evaluate_guess(guess: str, secret: str) -> List[LetterStatus]:
    """
    Score a guess against the secret word, position by position.

    A repeated guessed letter is PRESENT only as many times as it still
    occurs in the secret once the CORRECT matches have been taken out.

    Raises:
        LengthMismatchError: if guess and secret lengths differ
    """
    guess = guess.strip().upper()
    secret = secret.strip().upper()
    if len(guess) != len(secret):
        raise LengthMismatchError(
            f"Guess has {len(guess)} letters but the secret has {len(secret)}"
        )

    result: List[Optional[LetterStatus]] = [None] * len(secret)
    remaining = Counter(secret)

    # First pass: exact position matches consume their letter
    for i, (guessed, actual) in enumerate(zip(guess, secret)):
        if guessed == actual:
            result[i] = LetterStatus.CORRECT
            remaining[guessed] -= 1

    # Second pass: misplaced letters, limited by what is left in the pool
    for i, guessed in enumerate(guess):
        if result[i] is not None:
            continue
        if remaining[guessed] > 0:
            result[i] = LetterStatus.PRESENT
            remaining[guessed] -= 1
        else:
            result[i] = LetterStatus.ABSENT

    return result  # type: ignore[return-value]


def is_solved(evaluation: Sequence[LetterStatus]) -> bool:
    return bool(evaluation) and all(status is LetterStatus.CORRECT for status in evaluation)
