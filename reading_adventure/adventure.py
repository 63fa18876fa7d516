"""
Reading Adventure - Adventure Game Module

Branching-narrative game state and choice resolution:
- Content parsing (rounds and the transition table)
- Player session (hearts, stars, inventory, phase)
- Choice resolution and round advancement

Everything here is deterministic and does no I/O. Saving after a choice
is the caller's job (see game_api.AdventureGameAPI).
"""

from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any
from enum import Enum

from config import (
    MAX_HEARTS, STARTING_HEARTS, STARTING_ROUND, STARS_PER_CHOICE,
    TERMINAL_ROUND, LOST_ENDING, WIN_ENDINGS
)


class Effect(Enum):
    GAIN = "gain"
    LOSE = "lose"
    WIN = "win"
    NONE = "none"


class GamePhase(Enum):
    """Current phase of the adventure"""
    NOT_STARTED = "not_started"   # Name entry / intro
    IN_PROGRESS = "in_progress"   # Playing rounds
    ENDED = "ended"               # Won or out of hearts


# =============================================================================
# CONTENT
# =============================================================================

@dataclass(frozen=True)
class Transition:
    """What happens after a (round, option) choice"""

    message: str
    next_round: int
    effect: Effect
    hearts: int = 0
    item: Optional[str] = None
    ending: Optional[str] = None  # Stored as "score" in content documents

    @property
    def is_terminal(self) -> bool:
        return self.next_round == TERMINAL_ROUND

    @classmethod
    def from_dict(cls, data: Dict) -> "Transition":
        effect = Effect(data.get("effect", "none"))
        ending = data.get("score")
        if effect == Effect.WIN and ending not in WIN_ENDINGS:
            raise ValueError(f"Win transition has unknown ending: {ending!r}")
        next_round = int(data.get("nextRound", TERMINAL_ROUND))
        if next_round < 1 and next_round != TERMINAL_ROUND:
            raise ValueError(f"Transition leads to invalid round {next_round}")
        return cls(
            message=data.get("message", ""),
            next_round=next_round,
            effect=effect,
            hearts=int(data.get("hearts") or 0),
            item=data.get("item"),
            ending=ending,
        )


@dataclass(frozen=True)
class Round:
    """A single scene with its options"""

    round: int
    scene: str
    tip: str
    options: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "round": self.round,
            "scene": self.scene,
            "tip": self.tip,
            "options": [dict(o) for o in self.options],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Round":
        round_id = int(data["round"])
        if round_id < 1:
            raise ValueError(f"Round numbers start at 1, got {round_id}")
        return cls(
            round=round_id,
            scene=data.get("scene", ""),
            tip=data.get("tip", ""),
            options=[{"id": int(o["id"]), "text": o.get("text", "")} for o in data.get("options", [])],
        )


def parse_path_key(key: str):
    """Split a "{round}-{option}" content key into two ints."""
    round_part, sep, option_part = str(key).partition("-")
    if not sep:
        raise ValueError(f"Malformed path key: {key!r}")
    return int(round_part), int(option_part)


@dataclass
class AdventureContent:
    """
    Parsed adventure document.

    Transitions are indexed round first, then option, so a missing choice
    is an explicit lookup miss rather than a failed string match.
    """

    title: str
    rounds: Dict[int, Round]
    paths: Dict[int, Dict[int, Transition]]

    def get_round(self, round_id: int) -> Optional[Round]:
        return self.rounds.get(round_id)

    def get_transition(self, round_id: int, option_id: int) -> Optional[Transition]:
        return self.paths.get(round_id, {}).get(option_id)

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @classmethod
    def from_dict(cls, content: Dict, title: str = "") -> "AdventureContent":
        """Build from the stored document. Raises ValueError/KeyError on bad content."""
        rounds = {}
        for data in content.get("rounds") or []:
            parsed = Round.from_dict(data)
            rounds[parsed.round] = parsed

        paths: Dict[int, Dict[int, Transition]] = {}
        for key, data in (content.get("paths") or {}).items():
            round_id, option_id = parse_path_key(key)
            paths.setdefault(round_id, {})[option_id] = Transition.from_dict(data)

        if not rounds:
            raise ValueError("Adventure content has no rounds")

        return cls(title=title, rounds=rounds, paths=paths)


# =============================================================================
# PLAYER SESSION
# =============================================================================

@dataclass
class PlayerSession:
    """
    In-memory state for one adventure playthrough.

    Replaced wholesale by resolve_choice/advance; never mutated by them.
    """

    player_name: str = ""
    hearts: int = STARTING_HEARTS
    stars: int = 0
    items: List[str] = field(default_factory=list)
    current_round: int = STARTING_ROUND
    phase: GamePhase = GamePhase.NOT_STARTED
    ending: Optional[str] = None

    # Set while a choice message is on screen; cleared by advance()
    pending_round: Optional[int] = None

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.ENDED

    @property
    def resume_round(self) -> int:
        """Round a saved game should resume at"""
        return self.pending_round if self.pending_round else self.current_round

    def to_save_dict(self) -> Dict:
        """Serialize into a progress snapshot"""
        return {
            "progress": self.resume_round,
            "player_name": self.player_name,
            "hearts": self.hearts,
            "stars": self.stars,
            "items": list(self.items),
            "completed": self.is_over,
            "ending": self.ending,
        }

    @classmethod
    def from_save_dict(cls, data: Dict) -> "PlayerSession":
        """Restore a session from a progress snapshot; finished games stay finished"""
        hearts = data.get("hearts")
        hearts = STARTING_HEARTS if hearts is None else clamp_hearts(int(hearts))
        items = []
        for item in data.get("items") or []:
            if item not in items:
                items.append(item)
        ending = data.get("ending")
        if hearts == 0:
            ending = LOST_ENDING
        elif ending not in WIN_ENDINGS:
            ending = None
        # No hearts left means a defeat even without the completed flag
        ended = bool(data.get("completed")) or hearts == 0
        if ended and ending is None:
            raise ValueError("Finished game saved without an ending")
        return cls(
            player_name=data.get("player_name") or "",
            hearts=hearts,
            stars=max(0, int(data.get("stars") or 0)),
            items=items,
            current_round=int(data.get("progress") or STARTING_ROUND),
            phase=GamePhase.ENDED if ended else GamePhase.IN_PROGRESS,
            ending=ending if ended else None,
        )


def clamp_hearts(hearts: int) -> int:
    return max(0, min(hearts, MAX_HEARTS))


def start_session(player_name: str) -> PlayerSession:
    """Begin a fresh playthrough at round 1"""
    if not player_name or not player_name.strip():
        raise ValueError("Player name is required")
    return PlayerSession(player_name=player_name.strip(), phase=GamePhase.IN_PROGRESS)


def restart_session(session: PlayerSession) -> PlayerSession:
    """Back to the intro, keeping only the player's name"""
    return PlayerSession(player_name=session.player_name)


# =============================================================================
# CHOICE RESOLUTION
# =============================================================================

@dataclass(frozen=True)
class ChoiceResult:
    """Outcome of a resolved choice"""

    session: PlayerSession
    transition: Transition
    item_gained: Optional[str] = None

    @property
    def message(self) -> str:
        return self.transition.message

    def to_dict(self) -> Dict:
        return {
            "message": self.message,
            "effect": self.transition.effect.value,
            "item_gained": self.item_gained,
            "hearts": self.session.hearts,
            "stars": self.session.stars,
            "items": list(self.session.items),
            "next_round": self.session.pending_round,
            "game_over": self.session.is_over,
            "ending": self.session.ending,
        }


def resolve_choice(session: PlayerSession, content: AdventureContent,
                   round_id: int, option_id: int) -> Optional[ChoiceResult]:
    """
    Apply the transition for (round_id, option_id).

    Returns None and leaves the session alone when there is no transition
    for the pair, when the game is not in progress, when round_id is not the
    round on screen, or while the previous choice is still pending.
    """
    if session.phase != GamePhase.IN_PROGRESS:
        return None
    if session.pending_round is not None or round_id != session.current_round:
        return None

    transition = content.get_transition(round_id, option_id)
    if transition is None:
        return None

    hearts = session.hearts
    items = list(session.items)
    item_gained = None
    phase = session.phase
    ending = session.ending

    if transition.effect == Effect.GAIN:
        hearts = clamp_hearts(hearts + transition.hearts)
        if transition.item and transition.item not in items:
            items.append(transition.item)
            item_gained = transition.item
    elif transition.effect == Effect.LOSE:
        hearts = clamp_hearts(hearts - transition.hearts)
    elif transition.effect == Effect.WIN:
        phase = GamePhase.ENDED
        ending = transition.ending

    pending_round = None if transition.is_terminal else transition.next_round

    # Running out of hearts beats everything else
    if hearts <= 0:
        phase = GamePhase.ENDED
        ending = LOST_ENDING

    if phase == GamePhase.ENDED:
        pending_round = None

    new_session = replace(
        session,
        hearts=hearts,
        stars=session.stars + STARS_PER_CHOICE,
        items=items,
        phase=phase,
        ending=ending,
        pending_round=pending_round,
    )
    return ChoiceResult(session=new_session, transition=transition, item_gained=item_gained)


def advance(session: PlayerSession) -> PlayerSession:
    """Move to the pending round once the choice message has been shown"""
    if session.pending_round is None:
        return session
    if session.is_over:
        return replace(session, pending_round=None)
    return replace(session, current_round=session.pending_round, pending_round=None)
