"""
Server configuration.

Values come from environment variables, optionally seeded from a config.env
file beside this module. Game rules that never vary per deployment live in
game_settings.py instead.
"""

import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


def _env_flag(name: str, default: str = 'False') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes')


class Config:
    """Settings shared by every environment."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = _env_flag('DEBUG')

    # Socket.IO / HTTP listener
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Where in-progress daily puzzles are kept: "memory" or "mongo"
    SNAPSHOT_BACKEND = os.getenv('SNAPSHOT_BACKEND', 'memory')
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'wordibble')

    # Puzzle rules
    PUZZLE_TIMEZONE = os.getenv('PUZZLE_TIMEZONE', 'America/New_York')
    MAX_GUESSES_POLICY = os.getenv('MAX_GUESSES_POLICY', 'fixed')  # or "reveal_adjusted"
    VOWEL_REVEAL_POLICY = os.getenv('VOWEL_REVEAL_POLICY', 'leftmost')  # or "random"
    DATA_DIR = os.getenv('DATA_DIR')  # None means the bundled data

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    SNAPSHOT_BACKEND = os.getenv('SNAPSHOT_BACKEND', 'mongo')


class TestingConfig(Config):
    """In-memory snapshots and deterministic puzzle rules."""
    TESTING = True
    DEBUG = False
    SNAPSHOT_BACKEND = 'memory'
    MAX_GUESSES_POLICY = 'fixed'
    VOWEL_REVEAL_POLICY = 'leftmost'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
