import os
import sys
import pytest

# Ensure the backend root (containing the `watchparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from watchparty import create_app, socketio
from watchparty.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'
    STARTING_CREDITS = 1000
    PRIVATE_ROOM_PREFIX = 'private:'
    SETTLEMENT_INTERVAL_SEC = 15
    SCORE_FETCH_TIMEOUT_SEC = 2
    ESPN_BASE_URL = 'https://scores.test/apis/site/v2/sports'


class RecordingNotifier:
    """Collects everything the registry would push to clients."""

    def __init__(self):
        self.events = []
        self.subscriptions = set()

    def subscribe(self, sid, room_key):
        self.subscriptions.add((sid, room_key))

    def unsubscribe(self, sid, room_key):
        self.subscriptions.discard((sid, room_key))

    def room_state(self, room_key, snapshot):
        self.events.append(('room_state', room_key, snapshot))

    def chat(self, room_key, sender, text):
        self.events.append(('chat', room_key, {'sender': sender, 'text': text}))

    def to_room(self, room_key, event, data):
        self.events.append((event, room_key, data))

    def to_sid(self, sid, event, data):
        self.events.append((event, sid, data))

    def of(self, kind, target=None):
        return [data for k, t, data in self.events if k == kind and (target is None or t == target)]

    def reset(self):
        self.events.clear()


class FakeScores:
    """Stands in for the score feed client; records keyed by external id."""

    def __init__(self, records=None):
        self.records = dict(records or {})
        self.calls = []
        self.on_lookup = None

    def find_game(self, match):
        self.calls.append(match.external_id)
        if self.on_lookup:
            self.on_lookup(match)
        found = self.records.get(match.external_id)
        if isinstance(found, Exception):
            raise found
        return found

    def list_games(self, sport, league=None, date=None):
        self.calls.append((sport, league, date))
        return [r for r in self.records.values() if isinstance(r, dict)]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        application.extensions['room_registry'].clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def registry(notifier):
    return RoomRegistry(notifier, starting_credits=1000, private_prefix='private:')


@pytest.fixture()
def fake_scores():
    return FakeScores()
