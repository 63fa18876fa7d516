"""
Sign-in for Reading Adventure.

Google OAuth through Authlib. The signed-in player is kept in the Flask
session as one small record; anyone without it plays as a guest, which
leaves both games playable but turns off saving and score submission.
Without GOOGLE_CLIENT_ID configured, /login signs everyone in as a shared
demo reader.
"""

import os
import hmac
import logging
from functools import wraps
from typing import Optional, Dict
from flask import Blueprint, jsonify, session, redirect, request, url_for
from authlib.integrations.flask_client import OAuth

import config
from db import storage

logger = logging.getLogger(__name__)

auth = Blueprint('auth', __name__, url_prefix='/api')

oauth = OAuth()

SESSION_KEY = 'player'

DEMO_PLAYER = {
    'id': 'demo_user',
    'email': 'demo@reading-adventure.local',
    'first_name': 'Demo',
    'last_name': 'Reader',
}


def init_oauth(app):
    """Attach Authlib to the app and register the Google provider."""
    oauth.init_app(app)
    oauth.register(
        name='google',
        client_id=os.environ.get('GOOGLE_CLIENT_ID'),
        client_secret=os.environ.get('GOOGLE_CLIENT_SECRET'),
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={'scope': 'openid email profile'},
    )


def oauth_configured() -> bool:
    return bool(os.environ.get('GOOGLE_CLIENT_ID'))


def get_current_identity() -> Optional[str]:
    """Stable user id of the signed-in player, or None for guests."""
    player = session.get(SESSION_KEY) or {}
    return player.get('id') or None


def get_current_user() -> Optional[Dict]:
    player = session.get(SESSION_KEY)
    if not player or not player.get('id'):
        return None
    first = player.get('first_name') or ''
    return {
        'id': player['id'],
        'email': player.get('email'),
        'firstName': player.get('first_name'),
        'lastName': player.get('last_name'),
        # Suggested name for the games' name prompt
        'displayName': first or (player.get('email') or '').split('@')[0],
    }


def require_auth(f):
    """401 for guests"""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not get_current_identity():
            return jsonify({'message': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated


def may_act_for(user_id: Optional[str]) -> bool:
    """The signed-in player themselves, or the game server holding the service token"""
    token = request.headers.get(config.SERVICE_TOKEN_HEADER)
    if token and hmac.compare_digest(token.encode(), config.SERVICE_TOKEN.encode()):
        return True
    return bool(user_id) and get_current_identity() == user_id


def profile_from_userinfo(user_info: Dict) -> Dict:
    """Map Google's OpenID claims onto a users row"""
    return {
        'id': user_info['sub'],
        'email': user_info.get('email'),
        'first_name': user_info.get('given_name'),
        'last_name': user_info.get('family_name'),
        'profile_image_url': user_info.get('picture'),
    }


def sign_in(profile: Dict):
    session[SESSION_KEY] = {
        'id': profile['id'],
        'email': profile.get('email'),
        'first_name': profile.get('first_name'),
        'last_name': profile.get('last_name'),
    }
    session.permanent = True


def _safe_next(target: Optional[str]) -> str:
    """Only same-site paths are allowed as post-login redirects"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return '/'


@auth.route('/auth/user', methods=['GET'])
@require_auth
def get_user():
    return jsonify(get_current_user())


@auth.route('/login', methods=['GET'])
def login():
    next_url = _safe_next(request.args.get('next'))

    if not oauth_configured():
        logger.warning("Google OAuth not configured, signing in as the demo reader")
        sign_in(DEMO_PLAYER)
        return redirect(next_url)

    session['login_next'] = next_url
    redirect_uri = url_for('auth.callback', _external=True)
    logger.info(f"Starting OAuth flow, redirect_uri: {redirect_uri}")
    return oauth.google.authorize_redirect(redirect_uri)


@auth.route('/auth/callback', methods=['GET'])
def callback():
    next_url = _safe_next(session.pop('login_next', None))
    try:
        token = oauth.google.authorize_access_token()
        user_info = token.get('userinfo') or oauth.google.userinfo()
        profile = profile_from_userinfo(user_info)
        storage.upsert_user(profile)
    except Exception as e:
        logger.error(f"OAuth callback error: {e}")
        return redirect('/?error=auth_failed')

    sign_in(profile)
    logger.info(f"Signed in {profile['id']}")
    return redirect(next_url)


@auth.route('/logout', methods=['GET'])
def logout():
    user_id = get_current_identity()
    session.clear()
    logger.info(f"User {user_id} signed out")
    return redirect('/')
