from functools import wraps

from flask import current_app, request
from flask_socketio import emit

from scoreboard import socketio
from scoreboard.models import InvalidUpdate
from scoreboard.services.match.store import get_match_store
from scoreboard.services.match.timefmt import parse_operator_input
from scoreboard.services.storage import TEAM_KEYS

CLOCK_STEP_MS = 1000


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def operator_command(handler):
    """Reject malformed commands back to the sender instead of raising."""
    @wraps(handler)
    def wrapper(*args):
        try:
            handler(*args)
        except InvalidUpdate as exc:
            current_app.logger.warning(f"[command-rejected] sid={_get_sid()} event={handler.__name__}: {exc}")
            emit('error', {'message': str(exc)})
    return wrapper


def _payload(data) -> dict:
    if not isinstance(data, dict):
        raise InvalidUpdate('payload must be an object')
    return data


def handle_connect(auth=None):
    current_app.logger.info(f"Client connected: {_get_sid()}")
    # New observers always start from a full snapshot
    emit('gameState', get_match_store().snapshot())


def handle_disconnect(reason=None):
    current_app.logger.info(f"Client disconnected: {_get_sid()}")


@operator_command
def handle_update_game_state(data=None):
    get_match_store().apply_partial_update(data)
    touched = {k: data[k] for k in TEAM_KEYS if k in data}
    if touched:
        current_app.extensions['settings_storage'].save_team_defaults(touched)


@operator_command
def handle_start_clock(data=None):
    get_match_store().start_clock()


@operator_command
def handle_stop_clock(data=None):
    get_match_store().stop_clock()


@operator_command
def handle_set_clock(ms=None):
    get_match_store().set_clock(ms)


@operator_command
def handle_set_clock_text(text=None):
    ms = parse_operator_input(text)
    if ms is None:
        # Unparseable input keeps the prior value
        current_app.logger.info(f"[clock-input-ignored] sid={_get_sid()} text={text!r}")
        return
    get_match_store().set_clock(ms)


@operator_command
def handle_clock_increase(data=None):
    get_match_store().nudge_clock(CLOCK_STEP_MS)


@operator_command
def handle_clock_decrease(data=None):
    get_match_store().nudge_clock(-CLOCK_STEP_MS)


@operator_command
def handle_add_penalty(data=None):
    data = _payload(data)
    get_match_store().add_penalty(data.get('team'), data.get('playerNumber'), data.get('duration'))


@operator_command
def handle_edit_penalty(data=None):
    data = _payload(data)
    get_match_store().edit_penalty(data.get('team'), data.get('id'), data.get('duration'))


@operator_command
def handle_remove_penalty(data=None):
    data = _payload(data)
    get_match_store().remove_penalty(data.get('team'), data.get('id'))


@operator_command
def handle_set_penalty_player(data=None):
    data = _payload(data)
    get_match_store().set_penalty_player(data.get('team'), data.get('id'), data.get('playerNumber'))


@operator_command
def handle_adjust_team(data=None):
    data = _payload(data)
    get_match_store().adjust_team_stat(data.get('team'), data.get('field'), data.get('delta', 1))


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers.

    Event names are the camelCase ones the control panel and overlay emit.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('updateGameState', handle_update_game_state, namespace=namespace)
    socketio.on_event('startClock', handle_start_clock, namespace=namespace)
    socketio.on_event('stopClock', handle_stop_clock, namespace=namespace)
    socketio.on_event('setClock', handle_set_clock, namespace=namespace)
    socketio.on_event('setClockText', handle_set_clock_text, namespace=namespace)
    socketio.on_event('clockIncrease', handle_clock_increase, namespace=namespace)
    socketio.on_event('clockDecrease', handle_clock_decrease, namespace=namespace)
    socketio.on_event('addPenalty', handle_add_penalty, namespace=namespace)
    socketio.on_event('editPenalty', handle_edit_penalty, namespace=namespace)
    socketio.on_event('removePenalty', handle_remove_penalty, namespace=namespace)
    socketio.on_event('setPenaltyPlayer', handle_set_penalty_player, namespace=namespace)
    socketio.on_event('adjustTeam', handle_adjust_team, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
