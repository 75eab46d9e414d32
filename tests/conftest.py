"""
Shared fixtures: in-memory store, engine and an HTTP test client
"""
import pytest
from fastapi.testclient import TestClient

from debug_contest.core.feed import ChangeFeed
from debug_contest.core.progression import ProgressionEngine
from debug_contest.db import create_store_engine, make_session_factory
from debug_contest.main import create_app
from debug_contest.models import QuestionCreate, Settings
from debug_contest.store import RecordStore


ADMIN_SECRET = "test-secret"

SUM_BUGGY = "def total(n):\n    return sum(range(n))\n"
SUM_FIXED = "def total(n):\n    return sum(range(n + 1))\n"
EVEN_BUGGY = "def is_even(x):\n    return x % 2 == 1\n"
EVEN_FIXED = "def is_even(x):\n    return x % 2 == 0\n"


def question_data(title="Off by one", max_points=10, fixed=SUM_FIXED, buggy=SUM_BUGGY, **extra):
    data = {
        "title": title,
        "description": f"{title} description",
        "max_points": max_points,
        "buggy_code_python": buggy,
        "correct_answer_python": fixed,
        "buggy_code_c": "int f(void) { return 0; }",
        "correct_answer_c": "int f(void) { return 1; }",
        "buggy_code_java": "static int f() { return 0; }",
        "correct_answer_java": "static int f() { return 1; }",
    }
    data.update(extra)
    return data


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def store(feed):
    engine = create_store_engine("sqlite://")
    return RecordStore(make_session_factory(engine), feed=feed)


@pytest.fixture
def engine(store):
    return ProgressionEngine(store)


@pytest.fixture
def make_question(store):
    def _make(**kwargs):
        return store.create_question(QuestionCreate(**question_data(**kwargs)))
    return _make


@pytest.fixture
def client():
    settings = Settings(database_url="sqlite://", admin_secret=ADMIN_SECRET, leaderboard_size=10)
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return {"X-Admin-Secret": ADMIN_SECRET}
