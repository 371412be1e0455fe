import os
import random
import sys
import pytest

# Ensure the backend root (containing the `tugofmath` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tugofmath import create_app, socketio
from tugofmath.models import Question
from tugofmath.services.match import MatchStateMachine, RoomRegistry
from tugofmath.services.match.broadcast import Broadcaster


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    BALL_START = 50
    BALL_STEP = 10
    ROUND_ADVANCE_DELAY_MS = 0
    ROUND_ADVANCE_POLICY = 'auto'
    ANSWER_POLICY = 'unlimited'


class RecordingBroadcaster(Broadcaster):
    """Keeps every emission in order instead of sending it."""

    def __init__(self):
        self.events = []
        self.members = []
        self.closed = []

    def add_member(self, conn_id, code):
        self.members.append((conn_id, code))

    def to_room(self, code, event, payload):
        self.events.append(('room', code, event, payload))

    def to_connection(self, conn_id, event, payload):
        self.events.append(('conn', conn_id, event, payload))

    def close(self, code):
        self.closed.append(code)

    def named(self, event):
        return [e for e in self.events if e[2] == event]

    def names(self):
        return [e[2] for e in self.events]

    def clear(self):
        self.events = []


class ManualScheduler:
    """Queues delayed callbacks until the test fires them."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay_sec, fn, *args):
        self.pending.append((delay_sec, fn, args))

    def run_pending(self):
        pending, self.pending = self.pending, []
        for _, fn, args in pending:
            fn(*args)
        return len(pending)


class FixedQuestions:
    """Question factory that always asks 2 + 3."""

    def __init__(self):
        self.asked = 0

    def __call__(self):
        self.asked += 1
        return Question(text='2 + 3 = ?', answer=5, options=[3, 5, 7, 9])


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def questions():
    return FixedQuestions()


@pytest.fixture()
def registry():
    return RoomRegistry(ball_start=50, rng=random.Random(7))


@pytest.fixture()
def make_machine(registry, broadcaster, scheduler, questions):
    def _make(**overrides):
        config = {
            'BALL_STEP': 10,
            'ROUND_ADVANCE_DELAY_MS': 600,
            'ROUND_ADVANCE_POLICY': 'auto',
            'ANSWER_POLICY': 'unlimited',
        }
        config.update(overrides)
        return MatchStateMachine(registry, broadcaster, scheduler, config=config, question_factory=questions)
    return _make


@pytest.fixture()
def machine(make_machine):
    return make_machine()


@pytest.fixture()
def playing_room(machine, broadcaster):
    """A room with both players ready and the first round posted."""
    code = machine.create_room('p0')
    machine.join_room(code, 'p1')
    machine.submit_ready(code, 'p0')
    machine.submit_ready(code, 'p1')
    broadcaster.clear()
    return code


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
