import os
import random
import sys
import pytest

# Ensure the backend root (containing the `lobby` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from lobby import create_app, socketio
from lobby.services import LobbyService, Outbox


NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ALLOWED_ORIGINS = '*'
    OUTBOX_LIMIT = 256
    OUTBOX_OVERFLOW = 'drop_message'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def _messages(test_client):
    """Drain and return the lobby protocol payloads a test client received."""
    return [pkt['args'] for pkt in test_client.get_received(NAMESPACE) if pkt['name'] == 'message']


@pytest.fixture()
def received():
    return _messages


class Recorder:
    """Collects what an inline outbox emits, per connection."""

    def __init__(self):
        self.sent = {}
        self.closed = []

    def emit(self, sid, payload):
        self.sent.setdefault(sid, []).append(payload)

    def close(self, sid):
        self.closed.append(sid)

    def take(self, sid):
        return self.sent.pop(sid, [])

    def types(self, sid):
        return [m['type'] for m in self.take(sid)]


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def service(recorder):
    outbox = Outbox(recorder.emit, recorder.close)
    return LobbyService(outbox, rng=random.Random(7))
