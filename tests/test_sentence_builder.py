"""Tests for the word board and sentence builder session."""

import random
from collections import Counter

import pytest

from sentence_builder import (
    BuilderSession, SentenceContent, SentenceSet, WordBoard, WordTile, is_correct
)


def place(board, words):
    """Select tiles spelling out `words`, left to right"""
    for word in words:
        tile = next(t for t in board.available if t.text == word)
        assert board.select(tile.id)


def solve(session):
    place(session.board, session.current_set.correct.split(" "))
    return session.check()


def small_content(*sentences):
    return SentenceContent.from_dict({"sentences": [
        {"id": i + 1, "words": s.split(" "), "correct": s} for i, s in enumerate(sentences)
    ]})


# ── Content ──────────────────────────────────────────────────


def test_content_without_sentences_rejected():
    with pytest.raises(ValueError, match="Invalid game data format"):
        SentenceContent.from_dict({"sentences": []})


def test_sentence_words_validated():
    with pytest.raises(ValueError):
        SentenceSet.from_dict({"words": "The cat", "correct": "The cat"})


# ── Board ────────────────────────────────────────────────────


def test_deal_keeps_every_word(rng):
    words = ["The", "cat", "sleeps", "on", "the", "mat"]
    board = WordBoard.deal(words, rng)
    assert board.selected == []
    assert Counter(t.text for t in board.available) == Counter(words)
    assert len({t.id for t in board.available}) == len(words)


def test_duplicate_words_are_separate_tiles():
    board = WordBoard(available=[WordTile("word-0", "the"), WordTile("word-1", "the")])
    assert board.select("word-1")
    assert [t.id for t in board.selected] == ["word-1"]
    assert [t.id for t in board.available] == ["word-0"]


def test_select_and_remove_move_tiles_to_the_end():
    board = WordBoard(available=[WordTile("a", "one"), WordTile("b", "two"), WordTile("c", "three")])
    board.select("c")
    board.select("a")
    assert board.sentence == "three one"
    board.remove("c")
    assert [t.id for t in board.available] == ["b", "c"]
    assert board.sentence == "one"


def test_unknown_tile_ignored():
    board = WordBoard(available=[WordTile("a", "one")])
    assert not board.select("zzz")
    assert not board.remove("a")
    assert [t.id for t in board.available] == ["a"]


def test_tile_cannot_be_in_both_trays():
    with pytest.raises(ValueError):
        WordBoard(available=[WordTile("a", "x")], selected=[WordTile("a", "x")])


def test_checkable_only_when_every_tile_placed():
    board = WordBoard(available=[WordTile("a", "one"), WordTile("b", "two")])
    assert not board.checkable
    board.select("a")
    assert not board.checkable
    board.select("b")
    assert board.checkable


def test_exact_match():
    tiles = [WordTile(str(i), w) for i, w in enumerate(["The", "cat", "sleeps"])]
    assert is_correct(tiles, "The cat sleeps")
    assert not is_correct(tiles[::-1], "The cat sleeps")
    assert not is_correct(tiles[:2], "The cat sleeps")
    assert not is_correct(tiles, "the cat sleeps")


# ── Session ──────────────────────────────────────────────────


def test_correct_sentence_scores_and_waits(sentence_content, rng):
    session = BuilderSession(sentence_content, rng)
    assert solve(session) is True
    assert session.score == 20
    assert session.pending_advance
    assert session.level == 0

    assert session.advance()
    assert session.level == 1
    assert not session.pending_advance
    assert session.board.selected == []
    assert session.board.texts() == Counter(sentence_content.sentences[1].words)


def test_swapped_words_are_wrong(rng):
    session = BuilderSession(small_content("The cat sleeps on the mat"), rng)
    place(session.board, ["cat", "The", "sleeps", "on", "the", "mat"])
    assert session.check() is False
    assert session.score == 0
    assert not session.pending_advance
    # Tiles stay where they are for another try
    assert session.board.sentence == "cat The sleeps on the mat"


def test_check_needs_every_word(rng):
    session = BuilderSession(small_content("The cat sleeps"), rng)
    place(session.board, ["The", "cat"])
    assert session.check() is None


def test_board_locked_while_feedback_showing(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    solve(session)
    tile = session.board.selected[0]
    assert not session.remove_word(tile.id)
    assert session.check() is None
    assert session.score == 20


def test_last_level_completes(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    for _ in range(2):
        assert solve(session)
        session.advance()
    assert session.completed
    assert session.level == 1
    assert session.score == 40
    assert not session.advance()


def test_advance_without_correct_answer_does_nothing(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    assert not session.advance()
    assert session.level == 0


def test_reset_level_redeals(rng):
    session = BuilderSession(small_content("The cat sleeps"), rng)
    place(session.board, ["The"])
    session.reset_level()
    assert session.board.selected == []
    assert len(session.board.available) == 3


def test_restart(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    solve(session)
    session.advance()
    session.restart()
    assert (session.level, session.score, session.completed) == (0, 0, False)


# ── Snapshots ────────────────────────────────────────────────


def test_snapshot_mid_level(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    session.player_name = "Sam"
    place(session.board, ["Go"])
    saved = session.to_save_dict()
    assert saved["progress"] == 0
    assert saved["player_name"] == "Sam"
    assert [t["text"] for t in saved["selected_words"]] == ["Go"]
    assert [t["text"] for t in saved["available_words"]] == ["now"]


def test_snapshot_after_correct_answer_points_at_next_level(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    solve(session)
    saved = session.to_save_dict()
    assert saved["progress"] == 1
    assert saved["score"] == 20
    assert saved["selected_words"] is None


def test_restore_board(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    session.restore({
        "progress": 1,
        "player_name": "Sam",
        "score": 20,
        "selected_words": [{"id": "word-1", "text": "Run"}],
        "available_words": [{"id": "word-0", "text": "fast"}],
    })
    assert session.level == 1
    assert session.score == 20
    assert session.player_name == "Sam"
    assert session.board.sentence == "Run"


def test_restore_board_for_other_level_is_redealt(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    session.restore({
        "progress": 1,
        "selected_words": [{"id": "word-1", "text": "Go"}],
        "available_words": [{"id": "word-0", "text": "now"}],
    })
    assert session.board.selected == []
    assert session.board.texts() == Counter(["Run", "fast"])


def test_restore_clamps_level(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    session.restore({"progress": 99})
    assert session.level == 1


def test_full_run_with_seeded_shuffle(sentence_content):
    session = BuilderSession(sentence_content, random.Random(0))
    for _ in range(sentence_content.level_count):
        assert solve(session)
        session.advance()
    assert session.completed
    assert session.score == 20 * sentence_content.level_count


def test_completed_game_restores_as_completed(rng):
    content = small_content("Go now", "Run fast")
    session = BuilderSession(content, rng)
    for _ in range(2):
        solve(session)
        session.advance()
    saved = session.to_save_dict()
    assert saved["completed"] is True

    restored = BuilderSession(content, random.Random(9))
    restored.restore(saved)
    assert restored.completed
    assert restored.score == 40
    assert restored.check() is None
    assert restored.to_dict()["checkable"] is False
    assert restored.score == 40


def test_correct_last_level_saved_as_completed(rng):
    content = small_content("Go now")
    session = BuilderSession(content, rng)
    solve(session)
    # Saved while the feedback is still showing
    saved = session.to_save_dict()
    assert saved["completed"] is True
    assert saved["score"] == 20

    restored = BuilderSession(content, rng)
    restored.restore(saved)
    assert restored.completed
    assert restored.check() is None
    assert restored.score == 20


def test_mid_game_snapshot_not_completed(rng):
    session = BuilderSession(small_content("Go now", "Run fast"), rng)
    assert session.to_save_dict()["completed"] is False
