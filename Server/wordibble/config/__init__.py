"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game rules, constants and bundled data loaders
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    WORD_LENGTHS, MAX_GUESSES, VOWELS, load_word_list, load_puzzle_index, load_clues,
    validate_word_list_integrity, get_word_statistics
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'WORD_LENGTHS', 'MAX_GUESSES', 'VOWELS', 'load_word_list', 'load_puzzle_index',
    'load_clues', 'validate_word_list_integrity', 'get_word_statistics'
]
