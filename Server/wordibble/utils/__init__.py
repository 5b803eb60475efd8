"""
Utilities Package

Contains utility functions and helper modules.
"""

from .helpers import get_user_identity, get_puzzle_date, get_puzzle_number
from .game_logger import game_logger

__all__ = ['get_user_identity', 'get_puzzle_date', 'get_puzzle_number', 'game_logger']
