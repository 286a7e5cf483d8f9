import os
import sys
import pytest

# Ensure the backend root (containing the `quizroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizroom.errors import StorageError
from quizroom.game.actor import RoomActor
from quizroom.game.storage import MemoryStore
from quizroom.server import create_app


class TestConfig:
    TESTING = True
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    LOG_LEVEL = 'DEBUG'
    STATIC_DIR = ''
    STORAGE_DIR = ''
    DEFAULT_MODE = 'serious'
    DEFAULT_ROOM_CODE = 'demo'


class FlakyStore(MemoryStore):
    """MemoryStore whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, code, snapshot):
        if self.fail:
            raise StorageError('disk full')
        super().save(code, snapshot)


def make_scenario(rounds=3, points=10):
    return {
        'title': 'Network Basics',
        'rounds': [
            {
                'id': f'q{i + 1}',
                'prompt': f'Question {i + 1}?',
                'choices': [
                    {'id': 'A', 'text': 'first', 'correct': False},
                    {'id': 'B', 'text': 'second', 'correct': True},
                    {'id': 'C', 'text': 'third', 'correct': False},
                ],
                'points': points * (i + 1),
                'seconds': 20,
            }
            for i in range(rounds)
        ],
    }


@pytest.fixture()
def flask_app():
    return create_app(TestConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store():
    return FlakyStore()


@pytest.fixture()
def actor(store):
    return RoomActor('ROOM1', store)


@pytest.fixture()
def quiz_actor(actor):
    """Actor holding a three-round scenario (10, 20 and 30 points, B correct)."""
    actor.create(mode='funny', scenario=make_scenario())
    return actor
