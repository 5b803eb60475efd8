"""
Keyboard letter states derived from the whole game history.
"""

from typing import Dict, Iterable, Mapping

from ..models.game import LetterStatus
from .evaluator import evaluate_guess

_PRIORITY = {
    LetterStatus.ABSENT: 0,
    LetterStatus.PRESENT: 1,
    LetterStatus.CORRECT: 2,
}


def _upgrade(states: Dict[str, LetterStatus], letter: str, status: LetterStatus) -> None:
    current = states.get(letter)
    if current is None or _PRIORITY[status] > _PRIORITY[current]:
        states[letter] = status


def aggregate_keyboard(locked_letters: Mapping[int, str],
                       revealed_letters: Iterable[int],
                       secret: str,
                       attempts: Iterable[str]) -> Dict[str, LetterStatus]:
    """
    Map each seen letter to its best known status.

    Locked letters and lifeline letters start as CORRECT; each attempt's
    evaluation is then folded in. A letter's status is never downgraded.
    """
    secret = secret.upper()
    states: Dict[str, LetterStatus] = {}

    for letter in locked_letters.values():
        if letter:
            _upgrade(states, letter.upper(), LetterStatus.CORRECT)

    for position in revealed_letters:
        if 0 <= position < len(secret):
            _upgrade(states, secret[position], LetterStatus.CORRECT)

    for attempt in attempts:
        attempt = attempt.upper()
        for letter, status in zip(attempt, evaluate_guess(attempt, secret)):
            _upgrade(states, letter, status)

    return states
