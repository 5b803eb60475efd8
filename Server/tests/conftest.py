import os
import random
import tempfile
from datetime import datetime

# Keep test logs out of the working tree; must be set before wordibble is imported
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='wordibble-logs-'))

import pytest

from wordibble import create_app
from wordibble.config import TestingConfig
from wordibble.models.game import GameSettings
from wordibble.services.game_service import GameService, initialize_game_service
from wordibble.services.persistence_service import MemorySnapshotStore, PersistenceController
from wordibble.services.puzzle_service import PuzzleService
from wordibble.services.stats_service import StatsService


class FakeClock:
    """Settable clock; naive datetimes are read in the puzzle timezone."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def set_day(self, year, month, day):
        self.now = datetime(year, month, day, 12, 0)


@pytest.fixture
def clock():
    # 2025-09-01 is the CRANE puzzle
    return FakeClock(datetime(2025, 9, 1, 12, 0))


@pytest.fixture
def store():
    return MemorySnapshotStore()


@pytest.fixture
def persistence(store):
    return PersistenceController(store)


@pytest.fixture
def stats():
    return StatsService()


@pytest.fixture
def make_service(persistence, stats, clock):
    def factory(**kwargs):
        kwargs.setdefault('rng', random.Random(7))
        kwargs.setdefault('clock', clock)
        return GameService(PuzzleService(rng=random.Random(7)), persistence, stats, **kwargs)
    return factory


@pytest.fixture
def game_service(make_service):
    return make_service()


@pytest.fixture
def default_settings():
    return GameSettings(word_length=5, max_guesses=6)


@pytest.fixture
def app(store, clock):
    initialize_game_service(TestingConfig, store=store, rng=random.Random(7), clock=clock)
    app, socketio = create_app(TestingConfig)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
