"""
Presentation timeline for tile flips.

The timeline is derived from a guess that has already been committed; it
only tells the client when to animate each tile.
"""

from typing import Any, Dict, Sequence

from ..config.game_settings import FLIP_STAGGER_MS, FLIP_DURATION_MS
from ..models.game import LetterStatus


def build_flip_timeline(evaluation: Sequence[LetterStatus],
                        stagger_ms: int = FLIP_STAGGER_MS,
                        flip_ms: int = FLIP_DURATION_MS) -> Dict[str, Any]:
    steps = [
        {'index': i, 'status': status.value, 'delay_ms': i * stagger_ms}
        for i, status in enumerate(evaluation)
    ]
    return {
        'steps': steps,
        'flip_ms': flip_ms,
        'total_ms': len(steps) * stagger_ms + flip_ms,
    }
