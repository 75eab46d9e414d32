"""
SQLAlchemy tables and engine setup for the record store
"""
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Text, create_engine
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time, naive, as stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class QuestionRow(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    max_points = Column(Integer, nullable=False, default=10)
    buggy_code_c = Column(Text, nullable=False, default="")
    buggy_code_python = Column(Text, nullable=False, default="")
    buggy_code_java = Column(Text, nullable=False, default="")
    correct_answer_c = Column(Text, nullable=False, default="")
    correct_answer_python = Column(Text, nullable=False, default="")
    correct_answer_java = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)


class TeamRow(Base):
    __tablename__ = "teams"

    id = Column(String(64), primary_key=True)
    team_name = Column(String(100), unique=True, nullable=False)
    score = Column(Integer, nullable=False, default=0)
    current_qid = Column(Integer, ForeignKey("questions.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class SubmissionRow(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(String(64), ForeignKey("teams.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    language = Column(String(10), nullable=False)
    code = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


def create_store_engine(database_url: str, timeout: float = 10.0) -> Engine:
    """
    Create engine and make sure all tables exist

    In-memory SQLite shares one connection across threads so the test
    client and the app see the same database.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": timeout}
        if url.database in (None, "", ":memory:"):
            engine = create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(database_url, connect_args=connect_args)
    else:
        engine = create_engine(database_url, pool_timeout=timeout, pool_pre_ping=True)

    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)
