"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import (
    DailyPuzzle, GameSession, GameSettings, GameState, GameStatus, GuessResult, LetterStatus
)

__all__ = [
    'DailyPuzzle', 'GameSession', 'GameSettings', 'GameState', 'GameStatus',
    'GuessResult', 'LetterStatus'
]
