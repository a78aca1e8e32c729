import os
import sys
import threading
from types import SimpleNamespace

import pytest

# Ensure the project root (containing the `relay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from relay import bridge, create_app, registry, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    OPENAI_API_KEY = None
    OPENAI_MODEL = 'test-model'
    COMPLETION_TIMEOUT_SEC = 5
    MAX_ROOM_SIZE = 4
    SESSION_TTL_SEC = 0
    MAX_SESSIONS = 0
    RESET_ON_JOIN = True
    WELCOME_MESSAGE = 'Welcome to the game!'
    SOCKETIO_NAMESPACE = '/'


class StubCompletionClient:
    """Stands in for ``openai.OpenAI``: the n-th call answers with token
    ``t{n}`` and reply ``R{n}``. Set ``error`` to make every call raise it."""

    def __init__(self):
        self.responses = self
        self.calls = []
        self.error = None
        self._lock = threading.Lock()

    def create(self, model, input, previous_response_id=None):
        with self._lock:
            self.calls.append({'model': model, 'input': input, 'previous_response_id': previous_response_id})
            n = len(self.calls)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(id=f't{n}', output_text=f'R{n}')


@pytest.fixture()
def completion():
    return StubCompletionClient()


@pytest.fixture()
def flask_app(completion):
    application = create_app(TestConfig)
    bridge.client = completion
    with application.app_context():
        yield application
    registry.shutdown()
    bridge.client = None


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; all are disconnected on teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(connect):
    return connect()
