"""
Stats Service

Fire-and-forget sink for finished daily puzzles. Aggregation (streaks,
distributions) happens elsewhere; this service only keeps the raw results.
"""

import logging
from collections import deque
from dataclasses import dataclass, asdict
from typing import Any, Deque, Dict, List, Optional

from ..config.game_settings import MAX_RESULTS_PER_PLAYER
from ..utils.game_logger import game_logger


@dataclass
class GameResult:
    """One finished daily puzzle."""
    date: str
    word_length: int
    won: bool
    guess_count: int
    solution: str
    mode_flags: Dict[str, Any]


class StatsService:
    """
    In-process store of finished games, keyed by player.

    Only the latest max_results results are kept for each player.
    """

    def __init__(self, max_results: int = MAX_RESULTS_PER_PLAYER):
        self.max_results = max_results
        self.results: Dict[str, Deque[GameResult]] = {}

    def record_result(self, player_id: str, result: GameResult) -> bool:
        """Store a result. Failures are logged and never raised."""
        try:
            self.results.setdefault(player_id, deque(maxlen=self.max_results)).append(result)
            game_logger.log_game_event(player_id, 'result_recorded', **asdict(result))
            return True
        except Exception as e:
            game_logger.log_game_event(
                player_id, 'result_record_failed', level=logging.ERROR, error=str(e)
            )
            return False

    def get_results(self, player_id: str) -> List[GameResult]:
        return list(self.results.get(player_id, []))


# Global service instance
_stats_service = None


def get_stats_service() -> Optional[StatsService]:
    """Get the global stats service instance."""
    return _stats_service


def initialize_stats_service() -> StatsService:
    """Initialize the global stats service instance."""
    global _stats_service
    _stats_service = StatsService()
    return _stats_service
