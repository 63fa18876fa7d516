import copy
import random

import pytest
from flask import Flask

import config
import routes
from adventure import AdventureContent
from content import GAME_DEFINITIONS
from config import ADVENTURE, SENTENCE_BUILDER
from gateway import MemoryGateway
from sentence_builder import SentenceContent


def run_now(fn, *args):
    """Stand-in for gevent.spawn that runs the task inline"""
    return fn(*args)


def make_adventure(paths, rounds=None):
    """Small adventure document from a paths table"""
    round_ids = sorted({int(k.split("-")[0]) for k in paths})
    rounds = rounds or [
        {"round": r, "scene": f"Scene {r}", "tip": "", "options": [{"id": 1, "text": "a"}, {"id": 2, "text": "b"}]}
        for r in round_ids
    ]
    return AdventureContent.from_dict({"rounds": rounds, "paths": paths}, "Test")


@pytest.fixture
def adventure_content():
    return AdventureContent.from_dict(GAME_DEFINITIONS[ADVENTURE]["content"], "Forest")


@pytest.fixture
def sentence_content():
    return SentenceContent.from_dict(GAME_DEFINITIONS[SENTENCE_BUILDER]["content"], "Sentences")


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def memory_gateway():
    return MemoryGateway(copy.deepcopy(list(GAME_DEFINITIONS.values())))


class FakeStorage:
    """Dict-backed replacement for db.Storage"""

    def __init__(self):
        self.content = []
        self.progress = {}
        self.scores = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise RuntimeError("database is down")

    def get_game_data(self, game_type):
        self._check()
        return [c for c in self.content if c["game_type"] == game_type]

    def save_progress(self, user_id, game_type, progress):
        self._check()
        record = dict(progress, user_id=user_id, game_type=game_type, id=f"{user_id}:{game_type}")
        self.progress[(user_id, game_type)] = record
        return record

    def load_progress(self, user_id, game_type):
        self._check()
        return self.progress.get((user_id, game_type))

    def delete_progress(self, user_id, game_type):
        self._check()
        return self.progress.pop((user_id, game_type), None) is not None

    def add_high_score(self, user_id, player_name, game_type, score):
        self._check()
        row = {"id": str(len(self.scores) + 1), "user_id": user_id, "player_name": player_name,
               "game_type": game_type, "score": score}
        self.scores.append(row)
        return row

    def get_leaderboard(self, game_type, limit=10):
        self._check()
        rows = [s for s in self.scores if s["game_type"] == game_type]
        rows.sort(key=lambda s: s["score"], reverse=True)
        return rows[:limit]

    def get_rank(self, game_type, score):
        self._check()
        return 1 + sum(1 for s in self.scores if s["game_type"] == game_type and s["score"] > score)


@pytest.fixture
def fake_storage(monkeypatch):
    fake = FakeStorage()
    monkeypatch.setattr(routes, "storage", fake)
    return fake


@pytest.fixture
def api_app(fake_storage):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test"
    app.register_blueprint(routes.api)
    return app


@pytest.fixture
def client(api_app):
    """Client acting as the game server"""
    client = api_app.test_client()
    client.environ_base["HTTP_X_SERVICE_TOKEN"] = config.SERVICE_TOKEN
    return client
