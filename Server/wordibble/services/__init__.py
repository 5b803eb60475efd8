"""
Services Package

Contains all business logic and service classes.
"""

from .game_service import GameService, get_game_service, initialize_game_service
from .persistence_service import (
    PersistenceController, MemorySnapshotStore, MongoSnapshotStore, get_persistence_controller
)
from .puzzle_service import PuzzleService, get_puzzle_service
from .stats_service import StatsService, get_stats_service

__all__ = [
    'GameService', 'get_game_service', 'initialize_game_service',
    'PersistenceController', 'MemorySnapshotStore', 'MongoSnapshotStore', 'get_persistence_controller',
    'PuzzleService', 'get_puzzle_service',
    'StatsService', 'get_stats_service'
]
