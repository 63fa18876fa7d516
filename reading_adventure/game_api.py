"""
Reading Adventure - Game API Module

JSON-based game views for web frontends. Each connected player gets one
API object per game; it owns the session state, calls the game logic and
the persistence gateway, and yields structured messages the frontend
renders however it wants.

Timed steps (hiding a choice message, moving to the next level) are not
scheduled here: a method returns "advance_in" and the caller invokes
advance() once that delay has passed.
"""

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Optional, Generator, Dict, Any, List, Callable

import gevent

from config import (
    ADVENTURE, SENTENCE_BUILDER, MESSAGE_DISPLAY_SECONDS, LEADERBOARD_LIMIT,
    LOST_ENDING, STARTING_ROUND
)
from adventure import (
    AdventureContent, PlayerSession, GamePhase,
    start_session, restart_session, resolve_choice, advance
)
from sentence_builder import SentenceContent, BuilderSession
from gateway import PersistenceGateway, ContentUnavailable

logger = logging.getLogger(__name__)


# =============================================================================
# MESSAGE TYPES
# =============================================================================

class MessageType:
    """Types of messages the API can emit"""
    # Game flow
    GAME_LOADED = "game_loaded"
    GAME_START = "game_start"
    GAME_END = "game_end"
    GAME_SAVED = "game_saved"
    SAVED_GAME_FOUND = "saved_game_found"
    GAME_RESUMED = "game_resumed"
    INTRO = "intro"

    # Adventure
    ROUND = "round"
    CHOICE_RESULT = "choice_result"

    # Sentence builder
    BOARD = "board"
    FEEDBACK = "feedback"

    # Scores
    SCORE_SUBMITTED = "score_submitted"
    LEADERBOARD = "leaderboard"

    # System
    NOTICE = "notice"
    ERROR = "error"
    STATE = "state"


def emit(msg_type: str, data: Dict[str, Any] = None) -> Dict[str, Any]:
    """Create a standardized message"""
    return {
        "type": msg_type,
        "data": data or {},
        "timestamp": datetime.now().isoformat()
    }


def notice(message: str) -> Dict[str, Any]:
    """Transient inline message"""
    return emit(MessageType.NOTICE, {"message": message})


ENDING_TEXT = {
    LOST_ENDING: "Sadly, {name}, you ran out of hearts. Better luck next time!",
    "crown": "{name}, you are now the ruler of the forest kingdom with {stars} stars!",
    "wisdom": "{name}, you've become a powerful wizard with {stars} stars of knowledge!",
    "home": "{name}, you returned home safely with {stars} stars and amazing stories to tell!",
}


# =============================================================================
# SHARED VIEW BEHAVIOUR
# =============================================================================

class GameAPI:
    """
    Behaviour shared by both games: content loading, saving, resuming,
    score submission and the leaderboard.

    Subclasses set game_type and implement the snapshot hooks.
    """

    game_type: str = ""

    def __init__(self, gateway: PersistenceGateway, user_id: Optional[str] = None,
                 spawn: Callable = None):
        self.gateway = gateway
        self.user_id = user_id
        self.spawn = spawn or gevent.spawn
        self.title = ""
        self.content = None
        self.saved_game: Optional[Dict] = None
        self.score_submitted = False

    @property
    def is_logged_in(self) -> bool:
        return bool(self.user_id)

    # =========================================================================
    # HOOKS
    # =========================================================================

    def _set_content(self, definition: Dict):
        raise NotImplementedError

    def _session_snapshot(self) -> Dict:
        raise NotImplementedError

    def _restore(self, saved: Dict):
        raise NotImplementedError

    def _set_player_name(self, name: str):
        raise NotImplementedError

    def _final_score(self) -> Optional[int]:
        """Score to submit, or None while the game is still running"""
        raise NotImplementedError

    @property
    def player_name(self) -> str:
        raise NotImplementedError

    def get_current_state(self) -> Dict:
        raise NotImplementedError

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> Generator[Dict, None, None]:
        """Fetch content, then look for a saved game"""
        try:
            definition = self.gateway.fetch_content(self.game_type)
            self._set_content(definition)
        except ContentUnavailable as e:
            logger.error(f"Content unavailable for {self.game_type}: {e}")
            yield emit(MessageType.ERROR, {
                "message": "The game could not be loaded. Please go back home and try again.",
                "fatal": True
            })
            return
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid content for {self.game_type}: {e}")
            yield emit(MessageType.ERROR, {
                "message": "Invalid game data format",
                "fatal": True
            })
            return

        yield emit(MessageType.GAME_LOADED, {
            "game_type": self.game_type,
            "title": self.title,
            "logged_in": self.is_logged_in,
        })

        if not self.is_logged_in:
            return

        saved = self.gateway.load_progress(self.user_id, self.game_type)
        if saved:
            self.saved_game = saved
            yield emit(MessageType.SAVED_GAME_FOUND, {
                "player_name": saved.get("player_name"),
                "progress": saved.get("progress"),
                "last_updated": saved.get("last_updated"),
            })

    @property
    def is_loaded(self) -> bool:
        return self.content is not None

    def set_player_name(self, name: str) -> Generator[Dict, None, None]:
        """Set or change the name scores are recorded under"""
        if not self.is_loaded:
            return
        name = (name or "").strip()
        if not name:
            yield notice("Please enter your name")
            return
        self._set_player_name(name)
        yield emit(MessageType.STATE, self.get_current_state())

    # =========================================================================
    # SAVE / RESUME
    # =========================================================================

    def snapshot(self) -> Dict:
        """Progress record for the store"""
        snapshot = self._session_snapshot()
        snapshot["score_submitted"] = self.score_submitted
        return snapshot

    def save_game(self) -> Generator[Dict, None, None]:
        """Save current progress, reporting the outcome"""
        if not self.is_logged_in:
            yield notice("Sign in to save your progress")
            return
        if not self.is_loaded:
            return

        success = self.gateway.save_progress(self.user_id, self.game_type, self.snapshot())
        yield emit(MessageType.GAME_SAVED, {
            "success": success,
            "message": "Game progress saved!" if success else "Failed to save game progress"
        })

    def autosave(self):
        """Fire-and-forget save of the current state"""
        if not self.is_logged_in:
            return None
        return self.spawn(self._save_snapshot, self.snapshot())

    def _save_snapshot(self, snapshot: Dict) -> bool:
        success = self.gateway.save_progress(self.user_id, self.game_type, snapshot)
        if not success:
            logger.warning(f"Autosave failed for {self.user_id}/{self.game_type}")
        return success

    def load_saved_game(self) -> Generator[Dict, None, None]:
        """Resume the saved game offered at load time"""
        if not self.saved_game:
            yield notice("No saved game to load")
            return

        saved, self.saved_game = self.saved_game, None
        try:
            self._restore(saved)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Could not restore saved {self.game_type} game: {e}")
            yield notice("Your saved game could not be loaded")
            return

        # A finished game keeps its submission; anything else is still in play
        finished = self._final_score() is not None
        self.score_submitted = finished and bool(saved.get("score_submitted"))
        yield emit(MessageType.GAME_RESUMED, self.get_current_state())

    def dismiss_saved_game(self) -> Generator[Dict, None, None]:
        self.saved_game = None
        yield emit(MessageType.STATE, self.get_current_state())

    # =========================================================================
    # SCORES
    # =========================================================================

    def submit_score(self) -> Generator[Dict, None, None]:
        """Record the final score once, then show the leaderboard"""
        if not self.is_logged_in:
            yield notice("Sign in to submit your score")
            return

        score = self._final_score()
        if score is None:
            yield notice("Finish the game to submit your score")
            return
        if not self.player_name:
            yield notice("Enter your name to track scores")
            return
        if self.score_submitted:
            yield notice("Score already submitted")
            return

        rank = self.gateway.submit_score(self.user_id, self.player_name, self.game_type, score)
        if rank is None:
            yield notice("Failed to save high score")
            return

        self.score_submitted = True
        self.autosave()
        yield emit(MessageType.SCORE_SUBMITTED, {"score": score, "rank": rank})
        yield from self.get_leaderboard()

    def get_leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> Generator[Dict, None, None]:
        scores = self.gateway.get_leaderboard(self.game_type, limit)
        yield emit(MessageType.LEADERBOARD, {
            "game_type": self.game_type,
            "scores": [
                {
                    "rank": i + 1,
                    "player_name": s.get("player_name"),
                    "score": s.get("score", 0),
                    "achieved_at": s.get("achieved_at"),
                }
                for i, s in enumerate(scores)
            ]
        })


# =============================================================================
# ADVENTURE
# =============================================================================

class AdventureGameAPI(GameAPI):
    """The branching forest adventure"""

    game_type = ADVENTURE

    def __init__(self, gateway: PersistenceGateway, user_id: Optional[str] = None,
                 spawn: Callable = None):
        super().__init__(gateway, user_id, spawn)
        self.session = PlayerSession()

    def _set_content(self, definition: Dict):
        self.title = definition.get("title", "")
        self.content = AdventureContent.from_dict(definition["content"], self.title)

    @property
    def player_name(self) -> str:
        return self.session.player_name

    def _session_snapshot(self) -> Dict:
        return self.session.to_save_dict()

    def _set_player_name(self, name: str):
        self.session = replace(self.session, player_name=name)

    def _restore(self, saved: Dict):
        session = PlayerSession.from_save_dict(saved)
        if not self.content.get_round(session.current_round):
            logger.warning(f"Saved round {session.current_round} not in content, starting over")
            session.current_round = STARTING_ROUND
        if not session.player_name:
            session.player_name = self.session.player_name
        self.session = session

    def _final_score(self) -> Optional[int]:
        return self.session.stars if self.session.is_over else None

    # =========================================================================
    # GAME FLOW
    # =========================================================================

    def start_game(self, player_name: str) -> Generator[Dict, None, None]:
        """Begin at round 1 with a full set of hearts"""
        if not self.is_loaded:
            yield emit(MessageType.ERROR, {"message": "Game is not loaded"})
            return
        try:
            self.session = start_session(player_name)
        except ValueError:
            yield notice("Please enter your name to begin")
            return

        self.saved_game = None
        self.score_submitted = False
        yield emit(MessageType.GAME_START, {"player_name": self.session.player_name})
        yield self._round_message()

    def make_choice(self, round_id: int, option_id: int) -> Generator[Dict, None, None]:
        """
        Resolve a choice and show its message.

        The round changes only when advance() is called after "advance_in"
        seconds. Signed-in players are autosaved after every choice.
        """
        if not self.is_loaded:
            return

        result = resolve_choice(self.session, self.content, round_id, option_id)
        if result is None:
            if (self.session.phase == GamePhase.IN_PROGRESS
                    and round_id == self.session.current_round
                    and self.content.get_transition(round_id, option_id) is None):
                logger.warning(f"No transition for round {round_id} option {option_id}")
            return

        self.session = result.session

        data = result.to_dict()
        data["advance_in"] = MESSAGE_DISPLAY_SECONDS
        yield emit(MessageType.CHOICE_RESULT, data)

        if self.session.is_over:
            yield self._end_message()

        self.autosave()

    def advance(self) -> Generator[Dict, None, None]:
        """Hide the choice message and show the next round"""
        if self.session.pending_round is None:
            return
        self.session = advance(self.session)
        if not self.session.is_over:
            yield self._round_message()

    def restart_game(self) -> Generator[Dict, None, None]:
        self.session = restart_session(self.session)
        self.score_submitted = False
        yield emit(MessageType.INTRO, {
            "title": self.title,
            "player_name": self.session.player_name,
        })

    def _round_message(self) -> Dict:
        round_data = self.content.get_round(self.session.current_round)
        return emit(MessageType.ROUND, {
            "round": round_data.to_dict() if round_data else None,
            "round_count": self.content.round_count,
            "hearts": self.session.hearts,
            "stars": self.session.stars,
            "items": list(self.session.items),
        })

    def _end_message(self) -> Dict:
        ending = self.session.ending
        text = ENDING_TEXT.get(ending, ENDING_TEXT["home"])
        return emit(MessageType.GAME_END, {
            "ending": ending,
            "won": ending != LOST_ENDING,
            "title": "Your adventure has ended..." if ending == LOST_ENDING
                     else "Congratulations, you completed your quest!",
            "text": text.format(name=self.session.player_name, stars=self.session.stars),
            "hearts": self.session.hearts,
            "stars": self.session.stars,
            "items": list(self.session.items),
            "can_submit_score": self.is_logged_in,
        })

    def get_current_state(self) -> Dict:
        round_data = self.content.get_round(self.session.current_round) if self.content else None
        return {
            "game_type": self.game_type,
            "title": self.title,
            "player_name": self.session.player_name,
            "phase": self.session.phase.value,
            "round": round_data.to_dict() if round_data else None,
            "hearts": self.session.hearts,
            "stars": self.session.stars,
            "items": list(self.session.items),
            "ending": self.session.ending,
            "logged_in": self.is_logged_in,
            "has_saved_game": self.saved_game is not None,
        }


# =============================================================================
# SENTENCE BUILDER
# =============================================================================

class SentenceBuilderAPI(GameAPI):
    """Arrange shuffled words into the correct sentence"""

    game_type = SENTENCE_BUILDER

    def __init__(self, gateway: PersistenceGateway, user_id: Optional[str] = None,
                 spawn: Callable = None, rng: random.Random = None):
        super().__init__(gateway, user_id, spawn)
        self.rng = rng
        self.session: Optional[BuilderSession] = None

    def _set_content(self, definition: Dict):
        self.title = definition.get("title", "")
        self.content = SentenceContent.from_dict(definition["content"], self.title)
        self.session = BuilderSession(self.content, self.rng)

    @property
    def player_name(self) -> str:
        return self.session.player_name if self.session else ""

    def _session_snapshot(self) -> Dict:
        return self.session.to_save_dict()

    def _set_player_name(self, name: str):
        self.session.player_name = name

    def _restore(self, saved: Dict):
        self.session.restore(saved)

    def _final_score(self) -> Optional[int]:
        return self.session.score if self.session.completed else None

    # =========================================================================
    # GAME FLOW
    # =========================================================================


    def select_word(self, tile_id: str) -> Generator[Dict, None, None]:
        if self.is_loaded and self.session.select_word(tile_id):
            yield self._board_message()

    def remove_word(self, tile_id: str) -> Generator[Dict, None, None]:
        if self.is_loaded and self.session.remove_word(tile_id):
            yield self._board_message()

    def check_sentence(self) -> Generator[Dict, None, None]:
        """Compare the built sentence with the level's answer"""
        if not self.is_loaded:
            return
        correct = self.session.check()
        if correct is None:
            yield notice("Place every word before checking")
            return
        if correct:
            yield emit(MessageType.FEEDBACK, {
                "correct": True,
                "message": "Great job! That's correct!",
                "score": self.session.score,
                "advance_in": MESSAGE_DISPLAY_SECONDS,
            })
        else:
            yield emit(MessageType.FEEDBACK, {
                "correct": False,
                "message": "Not quite right. Try again!",
                "hint": "Make sure your words are in the right order.",
                "score": self.session.score,
            })

    def advance(self) -> Generator[Dict, None, None]:
        """Move on after a correct sentence"""
        if not self.is_loaded or not self.session.advance():
            return
        if self.session.completed:
            yield emit(MessageType.GAME_END, {
                "score": self.session.score,
                "level_count": self.content.level_count,
                "can_submit_score": self.is_logged_in and bool(self.session.player_name),
            })
        else:
            yield self._board_message()
        self.autosave()

    def reset_level(self) -> Generator[Dict, None, None]:
        if not self.is_loaded:
            return
        self.session.reset_level()
        yield self._board_message()

    def restart_game(self) -> Generator[Dict, None, None]:
        if not self.is_loaded:
            return
        self.session.restart()
        self.score_submitted = False
        yield self._board_message()

    def _board_message(self) -> Dict:
        return emit(MessageType.BOARD, self.session.to_dict())

    def get_current_state(self) -> Dict:
        state = {
            "game_type": self.game_type,
            "title": self.title,
            "logged_in": self.is_logged_in,
            "has_saved_game": self.saved_game is not None,
            "player_name": self.player_name,
        }
        if self.session:
            state.update(self.session.to_dict())
        return state


GAME_APIS = {
    ADVENTURE: AdventureGameAPI,
    SENTENCE_BUILDER: SentenceBuilderAPI,
}


def create_game_api(game_type: str, gateway: PersistenceGateway, user_id: Optional[str] = None,
                    spawn: Callable = None) -> Optional[GameAPI]:
    """Build the view for a game type, or None if the type is unknown"""
    api_class = GAME_APIS.get(game_type)
    if api_class is None:
        return None
    return api_class(gateway, user_id=user_id, spawn=spawn)


# =============================================================================
# SIMPLE SYNCHRONOUS WRAPPER (for simpler integrations)
# =============================================================================

class GameSession:
    """
    Simplified wrapper that collects generator output into lists.
    Useful for request/response style handlers (e.g., socket events).
    """

    def __init__(self, api: GameAPI):
        self.api = api

    @property
    def game_type(self) -> str:
        return self.api.game_type

    def _call(self, name: str, *args) -> List[Dict]:
        method = getattr(self.api, name, None)
        if method is None:
            return [emit(MessageType.ERROR, {"message": f"{name} is not available in {self.api.game_type}"})]
        return list(method(*args))

    def load(self) -> List[Dict]:
        return list(self.api.load())

    def start(self, player_name: str) -> List[Dict]:
        return self._call("start_game", player_name)

    def choose(self, round_id: int, option_id: int) -> List[Dict]:
        return self._call("make_choice", round_id, option_id)

    def set_name(self, name: str) -> List[Dict]:
        return self._call("set_player_name", name)

    def select_word(self, tile_id: str) -> List[Dict]:
        return self._call("select_word", tile_id)

    def remove_word(self, tile_id: str) -> List[Dict]:
        return self._call("remove_word", tile_id)

    def check(self) -> List[Dict]:
        return self._call("check_sentence")

    def reset_level(self) -> List[Dict]:
        return self._call("reset_level")

    def advance(self) -> List[Dict]:
        return list(self.api.advance())

    def restart(self) -> List[Dict]:
        return list(self.api.restart_game())

    def save(self) -> List[Dict]:
        return list(self.api.save_game())

    def load_saved(self) -> List[Dict]:
        return list(self.api.load_saved_game())

    def dismiss_saved(self) -> List[Dict]:
        return list(self.api.dismiss_saved_game())

    def submit_score(self) -> List[Dict]:
        return list(self.api.submit_score())

    def leaderboard(self) -> List[Dict]:
        return list(self.api.get_leaderboard())

    def get_state(self) -> Dict:
        return self.api.get_current_state()
