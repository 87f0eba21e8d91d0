import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Clock engine (milliseconds)
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '100'))
    DEFAULT_PERIOD_MS = int(os.environ.get('DEFAULT_PERIOD_MS', str(20 * 60 * 1000)))
    DEFAULT_PENALTY_MS = int(os.environ.get('DEFAULT_PENALTY_MS', str(2 * 60 * 1000)))
    # Flat JSON settings documents
    DATA_DIR = os.environ.get('DATA_DIR') or os.path.join(BASE_DIR, 'data')
    SHORTCUTS_FILE = os.environ.get('SHORTCUTS_FILE') or 'shortcuts.json'
    TEAM_DEFAULTS_FILE = os.environ.get('TEAM_DEFAULTS_FILE') or 'team-defaults.json'
    TEAM_PRESETS_FILE = os.environ.get('TEAM_PRESETS_FILE') or 'team-presets.json'
    # Comma separated; '*' allows any overlay host
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    PORT = int(os.environ.get('PORT', '3000'))
    # Optional: let the ticker spawn its worker under TESTING
    ENABLE_TICKER_IN_TESTS = False
