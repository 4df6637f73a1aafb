import os
import sys
import pytest

# Ensure the backend root (containing the `scoping` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scoping import create_app, socketio
from scoping.services.workshop import EventRouter, RoomStore, Rules


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SESSION_DURATION_SEC = 1800
    TICK_INTERVAL_SEC = 1
    TIMER_HEARTBEAT_SEC = 0
    REQUIRE_FULL_REVIEW_COVERAGE = False
    SOCKETIO_NAMESPACE = '/'
    CORS_ORIGINS = ['http://localhost:3000']


class RecordingBroadcaster:
    """Stands in for the Socket.IO broadcaster; keeps every snapshot sent."""

    def __init__(self):
        self.sent = []

    def broadcast(self, room):
        payload = room.snapshot()
        self.sent.append((room.code, payload))
        return payload

    def phases(self, code=None):
        return [p['phase'] for c, p in self.sent if code is None or c == code]


class FakeSocketIO:
    def __init__(self):
        self.tasks = []
        self.emitted = []
        self.sleeps = 0

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append(target)

    def sleep(self, seconds):
        self.sleeps += 1

    def emit(self, event, data, to=None, namespace=None):
        self.emitted.append((event, data, to, namespace))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        application.extensions['workshop'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/')
    except Exception:
        pass


@pytest.fixture()
def recorder():
    return RecordingBroadcaster()


@pytest.fixture()
def fake_socketio():
    return FakeSocketIO()


@pytest.fixture()
def make_router(recorder):
    def _make(session_budget=1800, require_full_coverage=False, socketio=None, autostart=False):
        return EventRouter(
            RoomStore(session_budget=session_budget),
            recorder,
            socketio=socketio,
            rules=Rules(session_budget=session_budget, require_full_coverage=require_full_coverage),
            autostart_timers=autostart,
        )
    return _make
