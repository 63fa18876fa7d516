"""
Database operations for Reading Adventure.
Content, progress and high score tables on Postgres via psycopg2.
"""

import json
import logging
from typing import Optional, List, Dict, Any
from contextlib import contextmanager

import psycopg2
from psycopg2.extras import RealDictCursor

import config

logger = logging.getLogger(__name__)


@contextmanager
def get_db():
    """Get a database connection with automatic cleanup."""
    if not config.DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable not set")

    conn = psycopg2.connect(config.DATABASE_URL)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _json_or_none(value):
    return json.dumps(value) if value is not None else None


class Storage:
    """Database storage operations."""

    # ==================== Users ====================

    def upsert_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or update a user on OAuth login."""
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    INSERT INTO users (id, email, first_name, last_name, profile_image_url, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
                    ON CONFLICT (id) DO UPDATE SET
                        email = EXCLUDED.email,
                        first_name = EXCLUDED.first_name,
                        last_name = EXCLUDED.last_name,
                        profile_image_url = EXCLUDED.profile_image_url,
                        updated_at = NOW()
                    RETURNING *
                """, (
                    user_data['id'],
                    user_data.get('email'),
                    user_data.get('first_name'),
                    user_data.get('last_name'),
                    user_data.get('profile_image_url')
                ))
                return dict(cur.fetchone())

    # ==================== Game Content ====================

    def get_game_data(self, game_type: str) -> List[Dict[str, Any]]:
        """
        Fetch content rows for a game type.
        Callers expect exactly one row; anything else is their error to report.
        """
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    "SELECT game_type, title, content FROM game_data WHERE game_type = %s",
                    (game_type,)
                )
                return [dict(row) for row in cur.fetchall()]

    def replace_game_data(self, definitions: List[Dict[str, Any]]) -> int:
        """Replace every content row with the given definitions in one transaction."""
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM game_data")
                for definition in definitions:
                    cur.execute("""
                        INSERT INTO game_data (game_type, title, content)
                        VALUES (%s, %s, %s)
                    """, (
                        definition['game_type'],
                        definition['title'],
                        json.dumps(definition['content'])
                    ))
                return len(definitions)

    # ==================== Game Progress ====================

    def save_progress(self, user_id: str, game_type: str, progress: Dict[str, Any]) -> Dict[str, Any]:
        """Save or overwrite the one in-progress save for (user, game)."""
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    INSERT INTO game_progress
                    (user_id, game_type, progress, player_name, items, hearts, stars,
                     score, selected_words, available_words, completed, ending,
                     score_submitted, last_updated)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
                    ON CONFLICT (user_id, game_type) DO UPDATE SET
                        progress = EXCLUDED.progress,
                        player_name = EXCLUDED.player_name,
                        items = EXCLUDED.items,
                        hearts = EXCLUDED.hearts,
                        stars = EXCLUDED.stars,
                        score = EXCLUDED.score,
                        selected_words = EXCLUDED.selected_words,
                        available_words = EXCLUDED.available_words,
                        completed = EXCLUDED.completed,
                        ending = EXCLUDED.ending,
                        score_submitted = EXCLUDED.score_submitted,
                        last_updated = NOW()
                    RETURNING *
                """, (
                    user_id, game_type,
                    progress.get('progress', 1),
                    progress.get('player_name'),
                    json.dumps(progress.get('items') or []),
                    progress.get('hearts', 5),
                    progress.get('stars', 0),
                    progress.get('score', 0),
                    _json_or_none(progress.get('selected_words')),
                    _json_or_none(progress.get('available_words')),
                    bool(progress.get('completed')),
                    progress.get('ending'),
                    bool(progress.get('score_submitted')),
                ))
                return dict(cur.fetchone())

    def load_progress(self, user_id: str, game_type: str) -> Optional[Dict[str, Any]]:
        """Load the saved game for (user, game)."""
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    "SELECT * FROM game_progress WHERE user_id = %s AND game_type = %s LIMIT 1",
                    (user_id, game_type)
                )
                result = cur.fetchone()
                return dict(result) if result else None

    def delete_progress(self, user_id: str, game_type: str) -> bool:
        """Delete the saved game for (user, game)."""
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM game_progress WHERE user_id = %s AND game_type = %s",
                    (user_id, game_type)
                )
                return cur.rowcount > 0

    # ==================== High Scores ====================

    def add_high_score(self, user_id: str, player_name: str, game_type: str, score: int) -> Dict[str, Any]:
        """Append a completed-game score."""
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    INSERT INTO high_scores (user_id, game_type, score, player_name)
                    VALUES (%s, %s, %s, %s)
                    RETURNING *
                """, (user_id, game_type, score, player_name))
                return dict(cur.fetchone())

    def get_leaderboard(self, game_type: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Top scores for a game, best first, earliest first on ties."""
        with get_db() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    SELECT * FROM high_scores
                    WHERE game_type = %s
                    ORDER BY score DESC, id ASC
                    LIMIT %s
                """, (game_type, limit))
                return [dict(row) for row in cur.fetchall()]

    def get_rank(self, game_type: str, score: int) -> int:
        """Get rank for a given score within a game."""
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM high_scores WHERE game_type = %s AND score > %s",
                    (game_type, score)
                )
                count = cur.fetchone()[0]
                return count + 1


# Global storage instance
storage = Storage()
