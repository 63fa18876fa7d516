"""
Reading Adventure - Configuration Module

All tunable game parameters live here. Adjust these to change game feel
without touching game logic.
"""

import os
import secrets

# =============================================================================
# GAME TYPES
# =============================================================================

ADVENTURE = "adventure"
SENTENCE_BUILDER = "sentence-builder"

GAME_TYPES = [ADVENTURE, SENTENCE_BUILDER]

# =============================================================================
# ADVENTURE SETTINGS
# =============================================================================

# Hearts are clamped to [0, MAX_HEARTS] on every gain or loss
MAX_HEARTS = 5
STARTING_HEARTS = 5

STARTING_ROUND = 1

# Every resolved choice earns a star, whatever its effect
STARS_PER_CHOICE = 1

# Marks a transition that does not lead to another round
TERMINAL_ROUND = -1

# Ending recorded when the player runs out of hearts
LOST_ENDING = "lost"

WIN_ENDINGS = ["crown", "wisdom", "home"]

# =============================================================================
# SENTENCE BUILDER SETTINGS
# =============================================================================

SENTENCE_POINTS = 20

# =============================================================================
# DISPLAY SETTINGS
# =============================================================================

# How long a choice message / sentence feedback stays up before the game moves on
MESSAGE_DISPLAY_SECONDS = 2.0

LEADERBOARD_LIMIT = 10

# =============================================================================
# BACKEND SETTINGS
# =============================================================================

DATABASE_URL = os.environ.get("DATABASE_URL")
API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:5000")

# Seconds before a gateway request gives up
REQUEST_TIMEOUT = 10

# Lets the game server write progress and scores for any player.
# Set it explicitly when the REST API runs in a different process.
SERVICE_TOKEN = os.environ.get("SERVICE_TOKEN") or secrets.token_hex(32)
SERVICE_TOKEN_HEADER = "X-Service-Token"

# "api" talks to the REST API, "memory" keeps everything in-process
GATEWAY = os.environ.get("GATEWAY", "api").lower()

# =============================================================================
# DEBUG SETTINGS (Development Only)
# =============================================================================

DEBUG_MODE = os.environ.get("DEBUG_MODE", "").lower() == "true"
