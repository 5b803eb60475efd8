"""
Helper Functions

Contains utility functions used throughout the application.
"""

from datetime import date, datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from ..config.game_settings import PUZZLE_EPOCH


def get_user_identity(request_obj=None, player_id: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        from flask import request
        request_obj = request

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'

    return {
        'user_ip': user_ip,
        'player_id': player_id,
    }


def get_puzzle_date(now: Optional[datetime] = None, tz_name: str = 'America/New_York') -> str:
    """
    Return today's puzzle date as YYYY-MM-DD in the puzzle timezone.

    The daily rollover happens at midnight in that timezone, whatever the
    server's local time is.
    """
    tz = ZoneInfo(tz_name)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    return now.astimezone(tz).strftime('%Y-%m-%d')


def get_puzzle_number(puzzle_date: str) -> int:
    """Puzzle #1 is the epoch day."""
    return (date.fromisoformat(puzzle_date) - PUZZLE_EPOCH).days + 1
