"""
Reading Adventure - Persistence Gateway

What the game views use to reach the content, progress and score stores.
Every call is single-shot: failures are logged and reported through the
return value (or ContentUnavailable for content), never retried.

Backends:
- ApiGateway: the REST API over HTTP
- MemoryGateway: process-local dicts (tests, offline runs)
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from itertools import count
from typing import List, Dict, Optional

import requests

import config
from auth import get_current_identity

logger = logging.getLogger(__name__)


class ContentUnavailable(Exception):
    """Game content could not be fetched, or the store did not hold exactly one definition"""


class PersistenceGateway(ABC):
    """Abstract interface for the game's backend"""

    @abstractmethod
    def fetch_content(self, game_type: str) -> Dict:
        """Get {game_type, title, content}; raises ContentUnavailable"""
        pass

    @abstractmethod
    def load_progress(self, user_id: str, game_type: str) -> Optional[Dict]:
        """Get the saved game, or None"""
        pass

    @abstractmethod
    def save_progress(self, user_id: str, game_type: str, snapshot: Dict) -> bool:
        """Upsert the saved game. Returns True if successful."""
        pass

    @abstractmethod
    def submit_score(self, user_id: str, player_name: str, game_type: str, score: int) -> Optional[int]:
        """Append a score and return its rank (1-indexed), or None on failure"""
        pass

    @abstractmethod
    def get_leaderboard(self, game_type: str, limit: int = config.LEADERBOARD_LIMIT) -> List[Dict]:
        """Top scores, best first; empty on failure"""
        pass

    def get_current_identity(self) -> Optional[str]:
        """Signed-in user id for the current request, None for guests"""
        return get_current_identity()


class ApiGateway(PersistenceGateway):
    """Gateway backed by the REST API"""

    def __init__(self, api_base: str = None, timeout: float = config.REQUEST_TIMEOUT):
        self.api_base = (api_base or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.http = requests.Session()
        self.http.headers[config.SERVICE_TOKEN_HEADER] = config.SERVICE_TOKEN

    def fetch_content(self, game_type: str) -> Dict:
        try:
            response = self.http.get(f"{self.api_base}/api/content/{game_type}", timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Content fetch error for {game_type}: {e}")
            raise ContentUnavailable(f"Could not reach the game server: {e}") from e

        if response.status_code != 200:
            logger.error(f"Content fetch for {game_type} failed with {response.status_code}")
            raise ContentUnavailable(f"Game content for {game_type} is unavailable")
        try:
            data = response.json()
        except ValueError as e:
            raise ContentUnavailable(f"Game content for {game_type} is not valid JSON") from e
        if not isinstance(data, dict) or not isinstance(data.get("content"), dict):
            raise ContentUnavailable(f"Game content for {game_type} is malformed")
        return data

    def load_progress(self, user_id: str, game_type: str) -> Optional[Dict]:
        try:
            response = self.http.get(
                f"{self.api_base}/api/progress/{user_id}/{game_type}",
                timeout=self.timeout
            )
            if response.status_code == 404:
                return None
            if response.status_code != 200:
                logger.error(f"Load progress failed with {response.status_code}")
                return None
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Load progress error: {e}")
            return None

    def save_progress(self, user_id: str, game_type: str, snapshot: Dict) -> bool:
        try:
            response = self.http.put(
                f"{self.api_base}/api/progress/{user_id}/{game_type}",
                json=snapshot,
                timeout=self.timeout
            )
            if response.status_code != 200:
                logger.error(f"Save progress failed with {response.status_code}")
                return False
            return True
        except requests.RequestException as e:
            logger.error(f"Save progress error: {e}")
            return False

    def submit_score(self, user_id: str, player_name: str, game_type: str, score: int) -> Optional[int]:
        try:
            response = self.http.post(
                f"{self.api_base}/api/scores",
                json={
                    "userId": user_id,
                    "playerName": player_name,
                    "gameType": game_type,
                    "score": score,
                },
                timeout=self.timeout
            )
            if response.status_code != 200:
                logger.error(f"Submit score failed with {response.status_code}")
                return None
            return response.json().get("rank", 1)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Submit score error: {e}")
            return None

    def get_leaderboard(self, game_type: str, limit: int = config.LEADERBOARD_LIMIT) -> List[Dict]:
        try:
            response = self.http.get(
                f"{self.api_base}/api/leaderboard/{game_type}",
                params={"limit": limit},
                timeout=self.timeout
            )
            if response.status_code != 200:
                logger.error(f"Leaderboard fetch failed with {response.status_code}")
                return []
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Leaderboard fetch error: {e}")
            return []


class MemoryGateway(PersistenceGateway):
    """In-process stores with the same upsert and append-only rules as the database"""

    def __init__(self, definitions: List[Dict] = None):
        self.content: List[Dict] = [copy.deepcopy(d) for d in (definitions or [])]
        self.progress: Dict[tuple, Dict] = {}
        self.scores: List[Dict] = []
        self._ids = count(1)

    def fetch_content(self, game_type: str) -> Dict:
        rows = [d for d in self.content if d.get("game_type") == game_type]
        if len(rows) != 1:
            logger.error(f"Found {len(rows)} content rows for {game_type}")
            raise ContentUnavailable(f"Game content for {game_type} is unavailable")
        return copy.deepcopy(rows[0])

    def load_progress(self, user_id: str, game_type: str) -> Optional[Dict]:
        record = self.progress.get((user_id, game_type))
        return copy.deepcopy(record) if record else None

    def save_progress(self, user_id: str, game_type: str, snapshot: Dict) -> bool:
        record = copy.deepcopy(snapshot)
        record.update({
            "user_id": user_id,
            "game_type": game_type,
            "last_updated": datetime.now().isoformat(),
        })
        self.progress[(user_id, game_type)] = record
        return True

    def submit_score(self, user_id: str, player_name: str, game_type: str, score: int) -> Optional[int]:
        self.scores.append({
            "id": next(self._ids),
            "user_id": user_id,
            "game_type": game_type,
            "player_name": player_name,
            "score": score,
            "achieved_at": datetime.now().isoformat(),
        })
        return 1 + sum(1 for s in self.scores if s["game_type"] == game_type and s["score"] > score)

    def get_leaderboard(self, game_type: str, limit: int = config.LEADERBOARD_LIMIT) -> List[Dict]:
        entries = [s for s in self.scores if s["game_type"] == game_type]
        # Stable sort keeps insertion order on ties
        entries.sort(key=lambda s: s["score"], reverse=True)
        return [dict(s) for s in entries[:limit]]


def create_gateway(kind: str = None) -> PersistenceGateway:
    """Build the process-wide gateway from config"""
    kind = kind or config.GATEWAY
    if kind == "memory":
        from content import GAME_DEFINITIONS
        return MemoryGateway(list(GAME_DEFINITIONS.values()))
    return ApiGateway()
