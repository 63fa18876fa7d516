"""
Initialize database tables for Reading Adventure.
Run this once to create the required tables in your Postgres database,
and again whenever the built-in game content changes: content rows are
replaced every run.
"""

import logging
import sys

import psycopg2

import config
from content import GAME_DEFINITIONS
from db import storage

logger = logging.getLogger(__name__)

SCHEMA = """
-- Game content, one row per game type
CREATE TABLE IF NOT EXISTS game_data (
    id VARCHAR PRIMARY KEY DEFAULT gen_random_uuid()::text,
    game_type VARCHAR NOT NULL UNIQUE,
    title VARCHAR NOT NULL,
    content JSONB NOT NULL,
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW()
);

-- In-progress saves, at most one per player per game
CREATE TABLE IF NOT EXISTS game_progress (
    id VARCHAR PRIMARY KEY DEFAULT gen_random_uuid()::text,
    user_id VARCHAR NOT NULL,
    game_type VARCHAR NOT NULL,
    progress INTEGER DEFAULT 1,
    player_name VARCHAR,
    items JSONB DEFAULT '[]',
    hearts INTEGER DEFAULT 5,
    stars INTEGER DEFAULT 0,
    score INTEGER DEFAULT 0,
    selected_words JSONB DEFAULT NULL,
    available_words JSONB DEFAULT NULL,
    completed BOOLEAN DEFAULT FALSE,
    ending VARCHAR,
    score_submitted BOOLEAN DEFAULT FALSE,
    last_updated TIMESTAMP DEFAULT NOW(),
    CONSTRAINT unique_user_game_progress UNIQUE (user_id, game_type)
);

CREATE INDEX IF NOT EXISTS idx_game_progress_user ON game_progress(user_id);

-- Completed-game scores, append-only; id order is insertion order
CREATE TABLE IF NOT EXISTS high_scores (
    id BIGSERIAL PRIMARY KEY,
    user_id VARCHAR NOT NULL,
    game_type VARCHAR NOT NULL,
    score INTEGER NOT NULL,
    player_name VARCHAR NOT NULL,
    achieved_at TIMESTAMP DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_high_scores_game_score ON high_scores(game_type, score DESC);
CREATE INDEX IF NOT EXISTS idx_high_scores_user ON high_scores(user_id);

-- Users table (for OAuth)
CREATE TABLE IF NOT EXISTS users (
    id VARCHAR(255) PRIMARY KEY,
    email VARCHAR(255) UNIQUE,
    first_name VARCHAR(255),
    last_name VARCHAR(255),
    profile_image_url TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
"""


def create_tables():
    conn = psycopg2.connect(config.DATABASE_URL)
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA)
        conn.commit()
    finally:
        conn.close()


def seed_content():
    """Replace all game content rows with the built-in definitions."""
    return storage.replace_game_data(list(GAME_DEFINITIONS.values()))


def init_db():
    if not config.DATABASE_URL:
        logger.error("DATABASE_URL environment variable not set")
        sys.exit(1)

    logger.info("Creating tables...")
    create_tables()

    logger.info("Seeding game content...")
    count = seed_content()

    logger.info(f"Done! Tables ready, {count} game definitions imported.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    init_db()
