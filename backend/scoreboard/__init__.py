from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
import json
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(config):
    value = config.get('CORS_ALLOWED_ORIGINS') or '*'
    if value.strip() == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


def _broadcast_snapshot(snapshot):
    # Server-level emit: reaches every observer, from handlers and the ticker alike
    socketio.emit('gameState', snapshot)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from scoreboard.models import ClockState, MatchState
    from scoreboard.services.match.store import MatchStore
    from scoreboard.services.match.ticker import ClockTicker
    from scoreboard.services.match.timefmt import now_ms
    from scoreboard.services.storage import SettingsStorage

    storage = SettingsStorage.from_config(flask_app.config, logger=flask_app.logger)

    # One match per process; saved team identities replace the stock names
    state = MatchState(clock=ClockState(time_remaining=flask_app.config['DEFAULT_PERIOD_MS'],
                                        last_update=now_ms()))
    defaults = storage.load_team_defaults()
    if defaults:
        state.home.apply_identity(defaults['homeTeam'])
        state.away.apply_identity(defaults['awayTeam'])
        flask_app.logger.info("[startup] restored saved team defaults")

    store = MatchStore(
        state,
        broadcast=_broadcast_snapshot,
        default_penalty_ms=flask_app.config['DEFAULT_PENALTY_MS'],
        logger=flask_app.logger,
    )
    store.attach_ticker(ClockTicker(flask_app, store.tick, interval_ms=flask_app.config['TICK_INTERVAL_MS']))

    flask_app.extensions['settings_storage'] = storage
    flask_app.extensions['match_store'] = store

    # Import and register blueprints here
    from scoreboard.main import main
    flask_app.register_blueprint(main)

    from scoreboard.api.settings import settings
    flask_app.register_blueprint(settings, url_prefix='/api')

    # Register Socket.IO event handlers
    from scoreboard.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('show-state')
    def show_state_command():
        """Prints the current match snapshot as JSON."""
        click.echo(json.dumps(store.snapshot(), indent=2))

    @click.command('presets-clear')
    def presets_clear_command():
        """Removes every saved team preset."""
        if storage.clear_team_presets():
            click.echo('Team presets cleared.')
        else:
            raise click.ClickException('Failed to clear team presets')

    flask_app.cli.add_command(show_state_command)
    flask_app.cli.add_command(presets_clear_command)

    return flask_app
