"""
REST API routes for Reading Adventure.
Content, progress and high score endpoints in front of the database.

Content and the leaderboard are public. Saved progress and new scores are
handled only for the signed-in player's own id, or for the game server
presenting the service token (see auth.may_act_for).
"""

import logging
from flask import Blueprint, request, jsonify

from auth import may_act_for
from config import GAME_TYPES, LEADERBOARD_LIMIT
from db import storage

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def format_datetime(dt):
    """Format datetime to ISO string."""
    if not dt:
        return None
    return dt.isoformat() if hasattr(dt, 'isoformat') else str(dt)


def format_progress(p):
    return {
        'user_id': p['user_id'],
        'game_type': p['game_type'],
        'progress': p.get('progress'),
        'player_name': p.get('player_name'),
        'items': p.get('items') or [],
        'hearts': p.get('hearts'),
        'stars': p.get('stars', 0),
        'score': p.get('score', 0),
        'selected_words': p.get('selected_words'),
        'available_words': p.get('available_words'),
        'completed': bool(p.get('completed')),
        'ending': p.get('ending'),
        'score_submitted': bool(p.get('score_submitted')),
        'last_updated': format_datetime(p.get('last_updated')),
    }


def format_score(s):
    return {
        'id': s.get('id'),
        'user_id': s['user_id'],
        'game_type': s['game_type'],
        'player_name': s['player_name'],
        'score': s.get('score', 0),
        'achieved_at': format_datetime(s.get('achieved_at')),
    }


def unknown_game(game_type):
    return jsonify({'error': f'Unknown game type: {game_type}'}), 404


def forbidden():
    return jsonify({'error': 'Not allowed for this user'}), 403


# ==================== Health Check ====================

@api.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


# ==================== Game Content ====================

@api.route('/content/<game_type>', methods=['GET'])
def get_content(game_type):
    if game_type not in GAME_TYPES:
        return unknown_game(game_type)
    try:
        rows = storage.get_game_data(game_type)
        if not rows:
            return jsonify({'error': 'Game content not found'}), 404
        if len(rows) > 1:
            logger.error(f"Found {len(rows)} content rows for {game_type}")
            return jsonify({'error': 'Game content is ambiguous'}), 500
        row = rows[0]
        return jsonify({
            'game_type': row['game_type'],
            'title': row['title'],
            'content': row['content'],
        })
    except Exception as e:
        logger.error(f"Get content error: {e}")
        return jsonify({'error': 'Failed to load game content'}), 500


# ==================== Game Progress ====================

@api.route('/progress/<user_id>/<game_type>', methods=['PUT'])
def save_progress(user_id, game_type):
    if game_type not in GAME_TYPES:
        return unknown_game(game_type)
    if not may_act_for(user_id):
        return forbidden()
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Missing progress data'}), 400

        result = storage.save_progress(user_id, game_type, data)
        return jsonify({'success': True, 'id': result['id']})
    except Exception as e:
        logger.error(f"Save progress error: {e}")
        return jsonify({'error': 'Failed to save game progress'}), 500


@api.route('/progress/<user_id>/<game_type>', methods=['GET'])
def load_progress(user_id, game_type):
    if game_type not in GAME_TYPES:
        return unknown_game(game_type)
    if not may_act_for(user_id):
        return forbidden()
    try:
        result = storage.load_progress(user_id, game_type)
        if not result:
            return jsonify({'error': 'Progress not found'}), 404
        return jsonify(format_progress(result))
    except Exception as e:
        logger.error(f"Load progress error: {e}")
        return jsonify({'error': 'Failed to load game progress'}), 500


@api.route('/progress/<user_id>/<game_type>', methods=['DELETE'])
def delete_progress(user_id, game_type):
    if game_type not in GAME_TYPES:
        return unknown_game(game_type)
    if not may_act_for(user_id):
        return forbidden()
    try:
        storage.delete_progress(user_id, game_type)
        return jsonify({'success': True})
    except Exception as e:
        logger.error(f"Delete progress error: {e}")
        return jsonify({'error': 'Failed to delete game progress'}), 500


# ==================== High Scores ====================

@api.route('/scores', methods=['POST'])
def add_score():
    try:
        entry = request.get_json(silent=True) or {}
        user_id = entry.get('userId')
        player_name = (entry.get('playerName') or '').strip()
        game_type = entry.get('gameType')
        score = entry.get('score')

        if not user_id or not player_name or not game_type:
            return jsonify({'error': 'Missing required fields'}), 400
        if not may_act_for(user_id):
            return forbidden()
        if game_type not in GAME_TYPES:
            return unknown_game(game_type)
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            return jsonify({'error': 'Score must be a non-negative integer'}), 400

        result = storage.add_high_score(user_id, player_name, game_type, score)
        rank = storage.get_rank(game_type, result.get('score', score))
        return jsonify({'success': True, 'id': result['id'], 'rank': rank})
    except Exception as e:
        logger.error(f"Add score error: {e}")
        return jsonify({'error': 'Failed to save high score'}), 500


@api.route('/leaderboard/<game_type>', methods=['GET'])
def get_leaderboard(game_type):
    if game_type not in GAME_TYPES:
        return unknown_game(game_type)
    try:
        limit = int(request.args.get('limit', LEADERBOARD_LIMIT))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    try:
        scores = storage.get_leaderboard(game_type, max(1, limit))
        return jsonify([format_score(s) for s in scores])
    except Exception as e:
        logger.error(f"Get leaderboard error: {e}")
        return jsonify({'error': 'Failed to get leaderboard'}), 500
