"""
Game Logger Module for the Wordibble Server

Structured logging for player actions, server responses and puzzle events
(loads, restores, reveals, snapshot discards, wins and losses). Every entry
is one JSON object after a timestamp/level prefix.
"""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config.app_config import Config
from .helpers import get_user_identity

EVENT_TYPES = ('USER_ACTION', 'SERVER_RESPONSE_SUCCESS', 'SERVER_RESPONSE_ERROR', 'GAME_EVENT', 'ERROR')

# Fields of a session view that are safe and short enough to log
_LOGGED_STATE_FIELDS = ('word_length', 'attempt_index', 'max_guesses', 'game_status', 'puzzle_date')


class GameLogger:
    """
    Writes JSON log lines for the puzzle server.

    INFO and above go to a dated file under log_dir; WARNING and above are
    echoed to the console.
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        self.level = resolved if isinstance(resolved, int) else logging.INFO

        self.logger = self._setup_logger()

    @property
    def log_file(self) -> Path:
        return self.log_dir / f"wordibble_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _setup_logger(self) -> logging.Logger:
        logger = logging.getLogger('wordibble')
        logger.setLevel(self.level)

        # Re-initialising must not stack handlers
        if logger.handlers:
            logger.handlers.clear()

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s', datefmt='%Y-%m-%d %H:%M:%S'
        ))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        return logger

    def _emit(self, level: int, event_type: str, action: str,
              user_info: Dict[str, Optional[str]], details: Dict[str, Any]) -> None:
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details,
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    def log_user_action(self, request, action: str, player_id: Optional[str] = None, **kwargs):
        """
        Log a player action as it arrives.

        Args:
            request: Flask request object (HTTP or Socket.IO)
            action: e.g. 'load_game', 'submit_guess', 'reveal_letter'
            player_id: Player identifier if known
            **kwargs: Extra details, such as the guess or the transport
        """
        details = {
            'endpoint': getattr(request, 'endpoint', None),
            'method': getattr(request, 'method', None),
            **kwargs
        }
        self._emit(logging.INFO, 'USER_ACTION', action, get_user_identity(request, player_id), details)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            player_id: Optional[str] = None,
                            **kwargs):
        """Log the response to an action. Failed responses are logged at ERROR."""
        details = {
            'success': success,
            'response': self._summarize_response(response_data),
            **kwargs
        }
        self._emit(
            logging.INFO if success else logging.ERROR,
            'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR',
            action, get_user_identity(request, player_id), details
        )

    def log_game_event(self, player_id: Optional[str], event: str, level: int = logging.INFO, **kwargs):
        """
        Log an engine event that did not come straight from a request,
        e.g. 'game_won', 'snapshot_discarded', 'daily_rollover'.
        """
        self._emit(level, 'GAME_EVENT', event, {'user_ip': None, 'player_id': player_id}, dict(kwargs))

    def log_error(self, request, error: Exception, action: str, player_id: Optional[str] = None):
        """Log an unexpected exception raised while handling an action."""
        details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
        }
        self._emit(logging.ERROR, 'ERROR', action, get_user_identity(request, player_id), details)

    def _summarize_response(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop bulky fields and never write the answer of a live game."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        summary = {key: value for key, value in data.items() if key not in ('state', 'text')}
        state = data.get('state')
        if isinstance(state, dict):
            summary['state'] = {field: state.get(field) for field in _LOGGED_STATE_FIELDS}
            summary['state']['locked_count'] = len(state.get('locked_letters') or {})
            summary['state']['answer_revealed'] = state.get('answer') is not None
        return summary

    def get_log_stats(self) -> Dict[str, Any]:
        """Count today's entries per event type."""
        log_file = self.log_file
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        counts = {event_type: 0 for event_type in EVENT_TYPES}
        total = 0
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    total += 1
                    _, _, payload = line.partition(' | ')
                    _, _, payload = payload.partition(' | ')
                    try:
                        event_type = json.loads(payload).get('event_type')
                    except ValueError:
                        continue
                    if event_type in counts:
                        counts[event_type] += 1
        except OSError as e:
            return {'error': f'Failed to get stats: {e}'}

        return {
            'log_file': str(log_file),
            'file_size_mb': round(log_file.stat().st_size / (1024 * 1024), 2),
            'total_entries': total,
            'events': counts,
        }


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
