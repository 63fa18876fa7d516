"""
Reading Adventure - Sentence Builder Module

Word-tile game: the player moves shuffled tiles from the "available" tray
into the sentence, then checks it against the level's correct sentence.
"""

import random
from collections import OrderedDict, Counter
from dataclasses import dataclass
from typing import Optional, List, Dict, Iterable

from config import SENTENCE_POINTS


# =============================================================================
# CONTENT
# =============================================================================

@dataclass(frozen=True)
class SentenceSet:
    """One level: the words to arrange and the sentence they make"""

    words: List[str]
    correct: str
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "SentenceSet":
        words = data["words"]
        correct = data["correct"]
        if not isinstance(words, list) or not words or not all(isinstance(w, str) for w in words):
            raise ValueError("Sentence words must be a non-empty list of strings")
        if not isinstance(correct, str):
            raise ValueError("Correct sentence must be a string")
        return cls(words=list(words), correct=correct, id=data.get("id"))


@dataclass
class SentenceContent:
    title: str
    sentences: List[SentenceSet]

    @property
    def level_count(self) -> int:
        return len(self.sentences)

    @classmethod
    def from_dict(cls, content: Dict, title: str = "") -> "SentenceContent":
        sentences = [SentenceSet.from_dict(s) for s in (content.get("sentences") or [])]
        if not sentences:
            raise ValueError("Invalid game data format")
        return cls(title=title, sentences=sentences)


# =============================================================================
# WORD BOARD
# =============================================================================

@dataclass(frozen=True)
class WordTile:
    """A word on the board. The id keeps duplicate words apart."""

    id: str
    text: str

    def to_dict(self) -> Dict:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict) -> "WordTile":
        return cls(id=str(data["id"]), text=data["text"])


class WordBoard:
    """
    Two disjoint ordered trays of tiles, keyed by tile id.

    Moving a tile between trays is a pop and an append on an OrderedDict.
    """

    def __init__(self, available: Iterable[WordTile] = (), selected: Iterable[WordTile] = ()):
        self._available = OrderedDict((t.id, t) for t in available)
        self._selected = OrderedDict((t.id, t) for t in selected)
        if self._available.keys() & self._selected.keys():
            raise ValueError("A tile cannot be in both trays")

    @classmethod
    def deal(cls, words: List[str], rng: random.Random) -> "WordBoard":
        """Shuffle the words into the available tray"""
        shuffled = list(words)
        rng.shuffle(shuffled)
        return cls(available=[WordTile(id=f"word-{i}", text=w) for i, w in enumerate(shuffled)])

    @property
    def available(self) -> List[WordTile]:
        return list(self._available.values())

    @property
    def selected(self) -> List[WordTile]:
        return list(self._selected.values())

    def select(self, tile_id: str) -> bool:
        """Move a tile from the tray to the end of the sentence"""
        tile = self._available.pop(tile_id, None)
        if tile is None:
            return False
        self._selected[tile.id] = tile
        return True

    def remove(self, tile_id: str) -> bool:
        """Move a tile from the sentence back to the end of the tray"""
        tile = self._selected.pop(tile_id, None)
        if tile is None:
            return False
        self._available[tile.id] = tile
        return True

    @property
    def checkable(self) -> bool:
        """Every tile placed"""
        return not self._available and bool(self._selected)

    @property
    def sentence(self) -> str:
        return " ".join(t.text for t in self._selected.values())

    def texts(self) -> Counter:
        return Counter(t.text for t in list(self._available.values()) + list(self._selected.values()))

    def to_dict(self) -> Dict:
        return {
            "available_words": [t.to_dict() for t in self.available],
            "selected_words": [t.to_dict() for t in self.selected],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "WordBoard":
        return cls(
            available=[WordTile.from_dict(t) for t in data.get("available_words") or []],
            selected=[WordTile.from_dict(t) for t in data.get("selected_words") or []],
        )


def is_correct(selected: List[WordTile], correct: str) -> bool:
    """Exact, case- and punctuation-sensitive match"""
    return " ".join(t.text for t in selected) == correct


# =============================================================================
# GAME SESSION
# =============================================================================

class BuilderSession:
    """State for one sentence builder playthrough"""

    def __init__(self, content: SentenceContent, rng: random.Random = None):
        self.content = content
        self.rng = rng or random.Random()
        self.player_name = ""
        self.level = 0
        self.score = 0
        self.completed = False
        self.pending_advance = False
        self.board = self._deal()

    def _deal(self) -> WordBoard:
        return WordBoard.deal(self.current_set.words, self.rng)

    @property
    def current_set(self) -> SentenceSet:
        return self.content.sentences[self.level]

    @property
    def is_last_level(self) -> bool:
        return self.level >= self.content.level_count - 1

    @property
    def locked(self) -> bool:
        """No moves while feedback is showing or after the last level"""
        return self.pending_advance or self.completed

    def select_word(self, tile_id: str) -> bool:
        if self.locked:
            return False
        return self.board.select(tile_id)

    def remove_word(self, tile_id: str) -> bool:
        if self.locked:
            return False
        return self.board.remove(tile_id)

    def check(self) -> Optional[bool]:
        """
        Check the sentence.

        Returns None when the sentence is not checkable yet, otherwise
        whether it matched. A match scores and waits for advance().
        """
        if self.locked or not self.board.checkable:
            return None
        if not is_correct(self.board.selected, self.current_set.correct):
            return False
        self.score += SENTENCE_POINTS
        self.pending_advance = True
        return True

    def advance(self) -> bool:
        """Go to the next level (or finish). Returns True if anything changed."""
        if not self.pending_advance:
            return False
        self.pending_advance = False
        if self.is_last_level:
            self.completed = True
        else:
            self.level += 1
            self.board = self._deal()
        return True

    def reset_level(self):
        """Reshuffle the current level"""
        if self.completed:
            return
        self.pending_advance = False
        self.board = self._deal()

    def restart(self):
        self.level = 0
        self.score = 0
        self.completed = False
        self.pending_advance = False
        self.board = self._deal()

    def to_save_dict(self) -> Dict:
        """Serialize into a progress snapshot"""
        # A pending advance is saved as the level the player is about to see,
        # or as a finished game when it was the last level
        level = self.level
        board = self.board.to_dict()
        completed = self.completed or (self.pending_advance and self.is_last_level)
        if self.pending_advance and not self.is_last_level:
            level += 1
            board = {"available_words": None, "selected_words": None}
        return {
            "progress": level,
            "player_name": self.player_name,
            "score": self.score,
            "completed": completed,
            **board,
        }

    def restore(self, data: Dict):
        """Load a progress snapshot; a board that doesn't fit the level is redealt"""
        level = int(data.get("progress") or 0)
        self.level = max(0, min(level, self.content.level_count - 1))
        self.player_name = data.get("player_name") or self.player_name
        self.score = max(0, int(data.get("score") or 0))
        self.completed = bool(data.get("completed"))
        self.pending_advance = False

        self.board = self._deal()
        if data.get("available_words") is not None or data.get("selected_words") is not None:
            try:
                board = WordBoard.from_dict(data)
            except (KeyError, TypeError, ValueError):
                return
            if board.texts() == Counter(self.current_set.words):
                self.board = board

    def to_dict(self) -> Dict:
        """Render state"""
        return {
            "level": self.level,
            "level_count": self.content.level_count,
            "score": self.score,
            "completed": self.completed,
            "checkable": self.board.checkable and not self.locked,
            **self.board.to_dict(),
        }
