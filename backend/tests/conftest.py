import os
import sys
import pytest

# Ensure the backend root (containing the `scoreboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scoreboard import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    TICK_INTERVAL_MS = 100
    DEFAULT_PERIOD_MS = 20 * 60 * 1000
    DEFAULT_PENALTY_MS = 2 * 60 * 1000
    SHORTCUTS_FILE = 'shortcuts.json'
    TEAM_DEFAULTS_FILE = 'team-defaults.json'
    TEAM_PRESETS_FILE = 'team-presets.json'
    CORS_ALLOWED_ORIGINS = '*'
    ENABLE_TICKER_IN_TESTS = False


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def data_dir(tmp_path):
    return tmp_path / 'data'


@pytest.fixture()
def flask_app(data_dir):
    class _Config(TestConfig):
        DATA_DIR = str(data_dir)

    application = create_app(_Config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def store(flask_app, fake_clock, monkeypatch):
    """The app's match store running on a fake time source."""
    match_store = flask_app.extensions['match_store']
    monkeypatch.setattr(match_store, '_now', fake_clock)
    monkeypatch.setattr(match_store.clock, '_now', fake_clock)
    return match_store


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
    )
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()
