#!/usr/bin/env python3
"""
Reading Adventure Game Server

Unified Python server that handles:
- REST API endpoints (content, progress, high scores)
- OAuth sign-in
- Socket.IO for real-time game communication

One game view lives per socket connection; it is dropped on disconnect.
"""

# Gevent monkey patching must happen first
from gevent import monkey
monkey.patch_all()

import os
import logging
from datetime import timedelta
from flask import Flask, request
from flask_socketio import SocketIO, emit

from config import GAME_TYPES, DEBUG_MODE
from gateway import create_gateway
from game_api import GameSession, create_game_api

logging.basicConfig(
    level=logging.DEBUG if DEBUG_MODE else logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SESSION_SECRET') or os.urandom(24).hex()

# Sessions are cryptographically signed with SECRET_KEY
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=7)

# Register REST API routes
from routes import api
app.register_blueprint(api)

# Register auth routes and initialize OAuth
from auth import auth, init_oauth
app.register_blueprint(auth)
init_oauth(app)

socketio = SocketIO(
    app,
    cors_allowed_origins="*",
    async_mode='gevent',
    ping_timeout=60,
    ping_interval=25
)

# Created once; every game view shares it
gateway = create_gateway()

sessions = {}


def send(messages):
    """Emit messages and schedule any delayed advance they ask for"""
    for msg in messages:
        emit('message', msg)
    delays = [m['data']['advance_in'] for m in messages if 'advance_in' in m.get('data', {})]
    if delays:
        schedule_advance(request.sid, max(delays))


def schedule_advance(sid, delay):
    """Advance the game after the message has been on screen for `delay` seconds"""
    game = sessions.get(sid)

    def run():
        socketio.sleep(delay)
        # Connection closed or game re-initialised in the meantime
        if sessions.get(sid) is not game:
            return
        for msg in game.advance():
            socketio.emit('message', msg, to=sid)

    socketio.start_background_task(run)


def get_session(sid):
    """Get session or emit error"""
    if sid not in sessions:
        emit('message', {'type': 'error', 'data': {'message': 'Session not found'}})
        return None
    return sessions[sid]


@socketio.on('connect')
def handle_connect():
    """Handle new client connection - wait for init event"""
    logger.info(f"Client connected: {request.sid}")


@socketio.on('init')
def handle_init(data):
    """Create the game view for this connection and load its content"""
    sid = request.sid
    game_type = (data or {}).get('game')
    if game_type not in GAME_TYPES:
        emit('message', {'type': 'error', 'data': {'message': f'Unknown game: {game_type}', 'fatal': True}})
        return

    user_id = gateway.get_current_identity()
    logger.info(f"Initializing {game_type} for {sid} with user_id: {user_id or 'guest'}")

    game = GameSession(create_game_api(game_type, gateway, user_id=user_id))
    sessions[sid] = game
    send(game.load())


@socketio.on('disconnect')
def handle_disconnect():
    """Handle client disconnection"""
    sid = request.sid
    logger.info(f"Client disconnected: {sid}")
    sessions.pop(sid, None)


@socketio.on('start')
def handle_start(data):
    """Start the adventure with the player's name"""
    game = get_session(request.sid)
    if game:
        send(game.start((data or {}).get('name', '')))


@socketio.on('choose')
def handle_choose(data):
    """Pick an option in the current round"""
    game = get_session(request.sid)
    if not game:
        return
    try:
        round_id = int(data['round'])
        option_id = int(data['option'])
    except (KeyError, TypeError, ValueError):
        emit('message', {'type': 'error', 'data': {'message': 'Invalid choice'}})
        return
    send(game.choose(round_id, option_id))


@socketio.on('set_name')
def handle_set_name(data):
    game = get_session(request.sid)
    if game:
        send(game.set_name((data or {}).get('name', '')))


@socketio.on('select_word')
def handle_select_word(data):
    game = get_session(request.sid)
    if game:
        send(game.select_word(str((data or {}).get('id', ''))))


@socketio.on('remove_word')
def handle_remove_word(data):
    game = get_session(request.sid)
    if game:
        send(game.remove_word(str((data or {}).get('id', ''))))


@socketio.on('check')
def handle_check():
    game = get_session(request.sid)
    if game:
        send(game.check())


@socketio.on('reset_level')
def handle_reset_level():
    game = get_session(request.sid)
    if game:
        send(game.reset_level())


@socketio.on('restart')
def handle_restart():
    """Restart the game"""
    game = get_session(request.sid)
    if game:
        logger.info(f"Restart requested for {request.sid}")
        send(game.restart())


@socketio.on('save')
def handle_save():
    """Save current game"""
    game = get_session(request.sid)
    if game:
        send(game.save())


@socketio.on('load_saved')
def handle_load_saved():
    """Resume the saved game offered at init"""
    game = get_session(request.sid)
    if game:
        send(game.load_saved())


@socketio.on('dismiss_saved')
def handle_dismiss_saved():
    game = get_session(request.sid)
    if game:
        send(game.dismiss_saved())


@socketio.on('submit_score')
def handle_submit_score():
    game = get_session(request.sid)
    if game:
        send(game.submit_score())


@socketio.on('leaderboard')
def handle_leaderboard():
    """Get leaderboard"""
    game = get_session(request.sid)
    if game:
        send(game.leaderboard())


@socketio.on('get_state')
def handle_get_state():
    """Get current game state"""
    game = get_session(request.sid)
    if game:
        emit('message', {'type': 'state', 'data': game.get_state()})


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    logger.info(f"Starting Reading Adventure server on port {port}")

    socketio.run(app, host='0.0.0.0', port=port, debug=DEBUG_MODE, allow_unsafe_werkzeug=True)
