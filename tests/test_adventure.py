"""Tests for adventure content parsing and choice resolution."""

import random

import pytest

from adventure import (
    AdventureContent, Effect, GamePhase, PlayerSession, Transition,
    advance, parse_path_key, resolve_choice, restart_session, start_session
)
from conftest import make_adventure


def playing(**kwargs):
    kwargs.setdefault("player_name", "Mia")
    kwargs.setdefault("phase", GamePhase.IN_PROGRESS)
    return PlayerSession(**kwargs)


# ── Content ──────────────────────────────────────────────────


def test_paths_indexed_by_round_then_option(adventure_content):
    assert adventure_content.round_count == 8
    t = adventure_content.get_transition(1, 1)
    assert t.effect == Effect.GAIN
    assert t.item == "compass"
    assert t.next_round == 2
    assert adventure_content.get_transition(1, 9) is None
    assert adventure_content.get_transition(42, 1) is None


def test_win_transitions_are_terminal(adventure_content):
    for option, ending in [(1, "crown"), (2, "wisdom"), (3, "home")]:
        t = adventure_content.get_transition(8, option)
        assert t.is_terminal
        assert t.ending == ending


@pytest.mark.parametrize("key", ["11", "a-1", "1-", ""])
def test_malformed_path_key(key):
    with pytest.raises(ValueError):
        parse_path_key(key)


def test_content_without_rounds_rejected():
    with pytest.raises(ValueError):
        AdventureContent.from_dict({"rounds": [], "paths": {}})


def test_win_without_known_ending_rejected():
    with pytest.raises(ValueError):
        Transition.from_dict({"message": "?", "nextRound": -1, "effect": "win", "score": "gold"})


@pytest.mark.parametrize("next_round", [0, -2])
def test_transition_to_invalid_round_rejected(next_round):
    with pytest.raises(ValueError):
        Transition.from_dict({"message": "?", "nextRound": next_round, "effect": "none"})


def test_unknown_effect_rejected():
    with pytest.raises(ValueError):
        Transition.from_dict({"message": "?", "nextRound": 2, "effect": "teleport"})


# ── Scenarios ────────────────────────────────────────────────


def test_enter_forest_cautiously(adventure_content):
    session = start_session("Mia")
    result = resolve_choice(session, adventure_content, 1, 1)

    assert result.message.startswith("You carefully enter the forest")
    assert result.session.hearts == 5
    assert result.session.items == ["compass"]
    assert result.item_gained == "compass"
    assert result.session.pending_round == 2
    assert result.session.stars == 1
    # Round only changes after the message has been shown
    assert result.session.current_round == 1
    assert advance(result.session).current_round == 2


def test_take_the_crown(adventure_content):
    session = playing(current_round=8, stars=7)
    result = resolve_choice(session, adventure_content, 8, 1)

    assert result.session.is_over
    assert result.session.ending == "crown"
    assert result.session.pending_round is None
    assert result.session.stars == 8


def test_resolution_does_not_touch_input(adventure_content):
    session = start_session("Mia")
    resolve_choice(session, adventure_content, 1, 1)
    assert session.items == []
    assert session.stars == 0
    assert session.pending_round is None


# ── Effects ──────────────────────────────────────────────────


def test_gain_clamped_to_max():
    content = make_adventure({"1-1": {"message": "yum", "nextRound": 2, "effect": "gain", "hearts": 3},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    result = resolve_choice(playing(hearts=4), content, 1, 1)
    assert result.session.hearts == 5


def test_lose_without_hearts_field_changes_nothing():
    content = make_adventure({"1-1": {"message": "meh", "nextRound": 2, "effect": "lose"},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    result = resolve_choice(playing(hearts=3), content, 1, 1)
    assert result.session.hearts == 3
    assert result.session.stars == 1


def test_item_not_duplicated():
    content = make_adventure({"1-1": {"message": "again", "nextRound": 2, "effect": "gain", "item": "compass"},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    result = resolve_choice(playing(items=["compass"]), content, 1, 1)
    assert result.session.items == ["compass"]
    assert result.item_gained is None


def test_none_effect_still_earns_star(adventure_content):
    session = playing(current_round=3, hearts=4, stars=2, items=["compass"])
    result = resolve_choice(session, adventure_content, 3, 2)
    assert result.transition.effect == Effect.NONE
    assert result.session.hearts == 4
    assert result.session.items == ["compass"]
    assert result.session.stars == 3


def test_running_out_of_hearts_overrides_next_round():
    content = make_adventure({"1-1": {"message": "ouch", "nextRound": 2, "effect": "lose", "hearts": 2},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    result = resolve_choice(playing(hearts=2), content, 1, 1)

    assert result.session.hearts == 0
    assert result.session.is_over
    assert result.session.ending == "lost"
    assert result.session.pending_round is None
    assert advance(result.session).current_round == 1


def test_hearts_stay_in_range_for_any_sequence():
    content = make_adventure({
        "1-1": {"message": "up", "nextRound": 1, "effect": "gain", "hearts": 3},
        "1-2": {"message": "down", "nextRound": 1, "effect": "lose", "hearts": 2},
    })
    rng = random.Random(7)
    for _ in range(50):
        session = playing()
        stars = 0
        for _ in range(30):
            result = resolve_choice(session, content, 1, rng.choice([1, 2]))
            stars += 1
            session = advance(result.session)
            assert 0 <= session.hearts <= 5
            assert session.stars == stars
            if session.is_over:
                assert session.ending == "lost"
                break


# ── Ignored choices ──────────────────────────────────────────


def test_missing_transition_is_a_no_op():
    content = make_adventure({"1-1": {"message": "ok", "nextRound": 2, "effect": "none"},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    assert resolve_choice(playing(), content, 1, 2) is None


def test_choice_for_other_round_ignored(adventure_content):
    assert resolve_choice(playing(current_round=2), adventure_content, 1, 1) is None


def test_choice_while_pending_ignored(adventure_content):
    result = resolve_choice(start_session("Mia"), adventure_content, 1, 1)
    assert resolve_choice(result.session, adventure_content, 1, 2) is None


def test_choice_after_end_ignored(adventure_content):
    session = playing(current_round=8, phase=GamePhase.ENDED, ending="crown")
    assert resolve_choice(session, adventure_content, 8, 2) is None


def test_choice_before_start_ignored(adventure_content):
    assert resolve_choice(PlayerSession(), adventure_content, 1, 1) is None


# ── Lifecycle ────────────────────────────────────────────────


def test_start_requires_name():
    with pytest.raises(ValueError):
        start_session("   ")
    session = start_session("  Mia ")
    assert session.player_name == "Mia"
    assert session.phase == GamePhase.IN_PROGRESS
    assert session.hearts == 5
    assert session.current_round == 1


def test_restart_resets_everything_but_name():
    session = playing(hearts=1, stars=6, items=["compass"], current_round=7,
                      phase=GamePhase.ENDED, ending="lost")
    fresh = restart_session(session)
    assert fresh.player_name == "Mia"
    assert fresh.phase == GamePhase.NOT_STARTED
    assert (fresh.hearts, fresh.stars, fresh.items, fresh.current_round) == (5, 0, [], 1)
    assert fresh.ending is None


def test_advance_without_pending_is_identity():
    session = playing(current_round=3)
    assert advance(session) is session


def test_full_playthrough(adventure_content):
    session = start_session("Mia")
    for round_id in range(1, 8):
        session = advance(resolve_choice(session, adventure_content, round_id, 2).session)
    result = resolve_choice(session, adventure_content, 8, 3)
    assert result.session.ending == "home"
    assert result.session.stars == 8
    assert "water flask" in result.session.items
    assert "magic sword" in result.session.items


# ── Snapshots ────────────────────────────────────────────────


def test_snapshot_uses_pending_round(adventure_content):
    result = resolve_choice(start_session("Mia"), adventure_content, 1, 1)
    saved = result.session.to_save_dict()
    assert saved == {"progress": 2, "player_name": "Mia", "hearts": 5, "stars": 1,
                     "items": ["compass"], "completed": False, "ending": None}


def test_restore_from_snapshot():
    session = PlayerSession.from_save_dict(
        {"progress": 4, "player_name": "Mia", "hearts": 9, "stars": 3, "items": ["compass", "compass"]}
    )
    assert session.current_round == 4
    assert session.hearts == 5
    assert session.items == ["compass"]
    assert session.phase == GamePhase.IN_PROGRESS


def test_restore_with_no_hearts_is_a_defeat():
    session = PlayerSession.from_save_dict({"progress": 6, "hearts": 0, "stars": 5})
    assert session.is_over
    assert session.ending == "lost"


def test_restore_defaults():
    session = PlayerSession.from_save_dict({})
    assert (session.current_round, session.hearts, session.stars, session.items) == (1, 5, 0, [])


def test_won_game_restores_as_ended(adventure_content):
    session = playing(current_round=8, stars=7, hearts=4)
    won = resolve_choice(session, adventure_content, 8, 1).session

    restored = PlayerSession.from_save_dict(won.to_save_dict())
    assert restored.phase == GamePhase.ENDED
    assert restored.ending == "crown"
    assert restored.stars == 8
    assert restored.hearts == 4
    # No way back into round 8
    assert resolve_choice(restored, adventure_content, 8, 1) is None


def test_lost_game_restores_as_ended():
    content = make_adventure({"1-1": {"message": "ouch", "nextRound": 2, "effect": "lose", "hearts": 5},
                              "2-1": {"message": "end", "nextRound": -1, "effect": "win", "score": "home"}})
    lost = resolve_choice(playing(), content, 1, 1).session

    restored = PlayerSession.from_save_dict(lost.to_save_dict())
    assert restored.is_over
    assert restored.ending == "lost"
    assert resolve_choice(restored, content, 1, 1) is None


def test_finished_save_without_ending_rejected():
    with pytest.raises(ValueError):
        PlayerSession.from_save_dict({"progress": 8, "hearts": 3, "completed": True})


def test_ending_ignored_for_unfinished_save():
    session = PlayerSession.from_save_dict({"progress": 4, "hearts": 3, "ending": "crown"})
    assert session.phase == GamePhase.IN_PROGRESS
    assert session.ending is None
