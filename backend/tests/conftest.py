import os
import sys

import pytest

# Ensure the backend root (containing the `scribble` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scribble.game.models import GameSettings
from scribble.game.registry import RoomRegistry
from scribble.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    REDACT_WORD = True


class FakeScheduler:
    """Records background tasks instead of running them; sleep returns immediately."""

    def __init__(self):
        self.tasks = []
        self.sleeps = []

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds=0):
        self.sleeps.append(seconds)

    def pending(self, name):
        return [(t, a, k) for t, a, k in self.tasks if getattr(t, '__name__', '') == name]

    def run_latest(self, name):
        target, args, kwargs = self.pending(name)[-1]
        return target(*args, **kwargs)


def fire_tick(registry, room):
    """Run one timer tick for the room's live clock generation."""
    return registry._on_tick(room.id, room.clock.generation)


@pytest.fixture()
def scheduler():
    return FakeScheduler()


@pytest.fixture()
def notifications():
    return []


@pytest.fixture()
def registry(scheduler, notifications):
    reg = RoomRegistry(
        scheduler=scheduler,
        settings=GameSettings(),
        notify=lambda event, room: notifications.append((event, room.id)),
    )
    yield reg
    reg.shutdown()


@pytest.fixture()
def flask_app(scheduler):
    application, socketio = create_app(TestConfig, scheduler=scheduler)
    application.extensions['test_socketio'] = socketio
    yield application
    application.extensions['scribble'].shutdown()


@pytest.fixture()
def app_registry(flask_app):
    return flask_app.extensions['scribble']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    socketio = flask_app.extensions['test_socketio']
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
