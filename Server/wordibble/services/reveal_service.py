"""
Reveal Service

Letter reveals: vowels pre-locked when a puzzle is generated, and the
one-time lifeline that exposes a random unlocked position during play.
"""

import random
from typing import Dict, List, Optional

from ..config.game_settings import VOWELS
from ..models.game import GameState, GameStatus

VOWEL_REVEAL_POLICIES = ('leftmost', 'random')


def compute_initial_locks(secret: str,
                          reveal_vowels: bool,
                          vowel_count: int,
                          policy: str = 'leftmost',
                          rng: Optional[random.Random] = None) -> Dict[int, str]:
    """
    Choose the vowel positions locked before the first guess.

    Args:
        secret: The puzzle word
        reveal_vowels: Whether vowels are pre-revealed at all
        vowel_count: Maximum number of vowel positions to lock
        policy: "leftmost" locks the first vowels in reading order, so a
            reload always produces the same board; "random" samples them
        rng: Random source for the "random" policy

    Returns:
        Dict mapping position to its locked letter
    """
    if policy not in VOWEL_REVEAL_POLICIES:
        raise ValueError(f"Unknown vowel reveal policy: {policy!r}")
    if not reveal_vowels or vowel_count <= 0:
        return {}

    secret = secret.upper()
    vowel_positions = [i for i, letter in enumerate(secret) if letter in VOWELS]
    count = min(vowel_count, len(vowel_positions))

    if policy == 'random':
        chosen = sorted((rng or random).sample(vowel_positions, count))
    else:
        chosen = vowel_positions[:count]

    return {i: secret[i] for i in chosen}


def eligible_reveal_positions(state: GameState) -> List[int]:
    """Positions that are neither locked nor already revealed."""
    return [
        i for i in range(state.word_length)
        if i not in state.locked_letters and i not in state.revealed_letters
    ]


def request_lifeline_reveal(state: GameState, rng: Optional[random.Random] = None) -> Optional[int]:
    """
    Spend one lifeline reveal on a uniformly random eligible position.

    Does nothing and returns None when the budget is exhausted, the game is
    over, or every position is already locked or revealed.
    """
    if state.letter_reveals_remaining <= 0 or state.game_status is not GameStatus.PLAYING:
        return None

    candidates = eligible_reveal_positions(state)
    if not candidates:
        return None

    position = (rng or random).choice(candidates)
    state.revealed_letters.add(position)
    state.letter_reveals_remaining -= 1
    return position
