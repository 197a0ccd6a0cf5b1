import os
import random
import sys

import pytest

# Ensure the backend root (containing the `doodleduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from doodleduel.config import Config
from doodleduel.game.registry import RoomRegistry
from doodleduel.game.settings import GameSettings
from doodleduel.game.timers import TimerHandle
from doodleduel.game.words import WordBank
from doodleduel.server import create_app


class ManualScheduler:
    """Virtual clock: timers fire only when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self._timers = []
        self._seq = 0
        self.tasks = []

    def call_later(self, delay, callback):
        handle = TimerHandle()
        self._seq += 1
        self._timers.append((self.now + delay, self._seq, handle, callback))
        return handle

    def spawn(self, fn, *args):
        self.tasks.append((fn, args))

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)

    def pending(self):
        return sum(1 for _, _, h, _ in self._timers if not h.cancelled)

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if t[0] <= target and not t[2].cancelled]
            if not due:
                break
            due.sort(key=lambda t: (t[0], t[1]))
            entry = due[0]
            self._timers.remove(entry)
            self.now = entry[0]
            entry[3]()
        self._timers = [t for t in self._timers if not t[2].cancelled]
        self.now = target


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def emit(self, event, payload=None, *, to, skip_sid=None):
        self.events.append({'event': event, 'payload': payload, 'to': to, 'skip_sid': skip_sid})

    def named(self, event, to=None):
        return [e for e in self.events if e['event'] == event and (to is None or e['to'] == to)]

    def last(self, event, to=None):
        found = self.named(event, to)
        return found[-1] if found else None

    def last_state(self):
        found = self.last('room:state')
        return found['payload'] if found else None

    def clear(self):
        self.events = []


class FakeClassifier:
    def __init__(self, verdict=None, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []

    def analyze(self, drawing_history, target_word):
        self.calls.append((drawing_history, target_word))
        if self.error is not None:
            raise self.error
        return self.verdict


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def settings():
    return GameSettings()


@pytest.fixture()
def word_bank():
    return WordBank(['turtle', 'castle', 'rocket'], rng=random.Random(7))


@pytest.fixture()
def classifier():
    return FakeClassifier()


@pytest.fixture()
def registry(notifier, scheduler, word_bank, settings, classifier):
    return RoomRegistry(
        notifier=notifier,
        scheduler=scheduler,
        word_bank=word_bank,
        settings=settings,
        classifier=classifier,
        rng=random.Random(42),
    )


@pytest.fixture()
def room(registry):
    return registry.create_room()


@pytest.fixture()
def lobby(room):
    """Room with Alice (owner) and Bob connected."""
    room.join('sid-alice', 'Alice', '🦊')
    room.join('sid-bob', 'Bob', '🐢')
    return room


@pytest.fixture()
def drawing_round(lobby):
    """Alice drawing 'turtle', Bob guessing."""
    lobby.start_game('sid-alice', 3)
    lobby.choose_word('sid-alice', 'turtle')
    return lobby


class TestConfig(Config):
    TESTING = True
    SOCKETIO_ASYNC_MODE = 'threading'
    TRUST_PROXY_HEADERS = False
    SCRIBBLE_CLASSIFIER_URL = ''
    LOG_LEVEL = 'WARNING'


@pytest.fixture()
def app_bundle(scheduler):
    app, socketio = create_app(TestConfig, scheduler=scheduler)
    return app, socketio


@pytest.fixture()
def flask_app(app_bundle):
    return app_bundle[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_bundle):
    app, socketio = app_bundle
    clients = []

    def make():
        c = socketio.test_client(app)
        clients.append(c)
        return c

    yield make
    for c in clients:
        if c.is_connected():
            c.disconnect()
