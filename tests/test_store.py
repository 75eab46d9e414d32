"""
Tests for the record store, session store and question loader
"""
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from debug_contest.errors import StoreError
from debug_contest.models import SessionData
from debug_contest.question_loader import load_questions, seed_questions
from debug_contest.session import SessionStore


# ==================== RECORD STORE ====================

def test_questions_ordered_by_creation(store, make_question):
    first = make_question(title="First")
    second = make_question(title="Second")
    third = make_question(title="Third")

    assert [q.id for q in store.list_questions()] == [first.id, second.id, third.id]
    assert [q.id for q in store.list_questions_newest_first()] == [third.id, second.id, first.id]
    assert store.count_questions() == 3


def test_same_timestamp_ties_break_by_insertion(store, make_question, monkeypatch):
    """Questions created in the same instant keep insertion order"""
    import debug_contest.store as store_module

    frozen = datetime(2025, 1, 1, 12, 0, 0)
    monkeypatch.setattr(store_module, "utcnow", lambda: frozen)
    ids = [make_question(title=f"Q{i}").id for i in range(3)]
    assert [q.id for q in store.list_questions()] == ids


def test_get_question_miss_returns_none(store):
    assert store.get_question(42) is None


def test_find_team_miss_is_not_an_error(store):
    assert store.find_team_by_name("Nobody") is None


def test_team_names_are_case_sensitive(store):
    alpha, created_lower = store.find_or_create_team("alpha")
    alpha_upper, created_upper = store.find_or_create_team("Alpha")
    assert created_lower and created_upper
    assert alpha.id != alpha_upper.id


def test_find_or_create_is_idempotent(store, make_question):
    make_question()
    team, created = store.find_or_create_team("Alpha")
    again, created_again = store.find_or_create_team("Alpha")

    assert created
    assert not created_again
    assert again.id == team.id
    assert len(store.list_teams_by_score()) == 1


def test_concurrent_first_login_reuses_winner(store, make_question, monkeypatch):
    """Name taken between lookup and insert: the existing row is returned"""
    from sqlalchemy.orm import Session

    make_question()
    winner, _ = store.find_or_create_team("Alpha")

    original_execute = Session.execute
    calls = []

    class _Miss:
        def scalar_one_or_none(self):
            return None

    def first_lookup_misses(self, *args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            return _Miss()
        return original_execute(self, *args, **kwargs)

    monkeypatch.setattr(Session, "execute", first_lookup_misses)

    team, created = store.find_or_create_team("Alpha")

    assert not created
    assert team.id == winner.id
    assert [t.team_name for t in store.list_teams_by_score()] == ["Alpha"]


def test_utcnow_is_naive_utc():
    from datetime import timezone
    from debug_contest.db import utcnow

    now = utcnow()
    assert now.tzinfo is None
    assert abs((datetime.now(timezone.utc).replace(tzinfo=None) - now).total_seconds()) < 5


def test_team_id_format(store):
    team, _ = store.find_or_create_team("Bug Squashers")
    assert team.id.startswith("team-bug-squashers-")


def test_advance_team_is_conditional(store, make_question):
    q0 = make_question()
    q1 = make_question(title="Second")
    team, _ = store.find_or_create_team("Alpha")

    updated = store.advance_team(team.id, q0.id, q1.id, 10)
    assert updated.score == 10
    assert updated.current_qid == q1.id
    assert updated.completed_at is None

    done = store.advance_team(team.id, q1.id, None, 5)
    assert done.score == 15
    assert done.current_qid is None
    assert done.completed_at is not None


def test_store_failure_surfaces_as_store_error(store, monkeypatch):
    """Database faults become StoreError, never a raw driver exception"""
    from sqlalchemy.orm import Session

    def broken_execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "execute", broken_execute)
    with pytest.raises(StoreError):
        store.find_team_by_name("Alpha")


# ==================== SESSION STORE ====================

def test_session_lifecycle():
    sessions = SessionStore()
    token = sessions.save(SessionData(team_id="team-a-1", team_name="A", current_qid=1))

    assert sessions.load(token).team_name == "A"
    sessions.update_current_qid(token, 2)
    assert sessions.load(token).current_qid == 2

    assert sessions.clear(token)
    assert sessions.load(token) is None
    assert not sessions.clear(token)


def test_session_tokens_are_unique():
    sessions = SessionStore()
    data = SessionData(team_id="team-a-1", team_name="A")
    assert sessions.save(data) != sessions.save(data)
    assert len(sessions) == 2


def test_session_load_without_token():
    assert SessionStore().load(None) is None
    assert SessionStore().load("") is None


# ==================== QUESTION LOADER ====================

QUESTIONS_YAML = """
questions:
  - title: Off by one
    description: Sum 1..n
    max_points: 10
    buggy_code_python: |
      def total(n):
          return sum(range(n))
    correct_answer_python: |
      def total(n):
          return sum(range(n + 1))
  - title: Second
    description: Another
    max_points: 20
"""


def test_load_questions_from_yaml(tmp_path):
    path = tmp_path / "questions.yaml"
    path.write_text(QUESTIONS_YAML, encoding="utf-8")

    questions = load_questions(str(path))

    assert [q.title for q in questions] == ["Off by one", "Second"]
    assert questions[0].correct_answer_python.startswith("def total(n):")
    assert questions[1].buggy_code_java == ""


def test_load_questions_invalid_entry(tmp_path):
    path = tmp_path / "questions.yaml"
    path.write_text("questions:\n  - title: ''\n    description: x\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_questions(str(path))


def test_load_questions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_questions(str(tmp_path / "missing.yaml"))


def test_seed_only_into_empty_store(store, tmp_path):
    path = tmp_path / "questions.yaml"
    path.write_text(QUESTIONS_YAML, encoding="utf-8")

    assert seed_questions(store, str(path)) == 2
    assert seed_questions(store, str(path)) == 0
    assert store.count_questions() == 2


# ==================== CONFIG ====================

def test_settings_from_yaml(tmp_path, monkeypatch):
    from debug_contest.config import load_settings

    path = tmp_path / "contest.yaml"
    path.write_text("admin_secret: hunter2\nleaderboard_size: 5\n", encoding="utf-8")
    monkeypatch.setenv("CONTEST_CONFIG", str(path))

    settings = load_settings()
    assert settings.admin_secret == "hunter2"
    assert settings.leaderboard_size == 5
    assert settings.database_url == "sqlite:///data/contest.db"


def test_settings_missing_file_uses_defaults(tmp_path):
    from debug_contest.config import load_settings

    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings.leaderboard_size == 10
