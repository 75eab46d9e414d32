"""
Data models for the debug contest server
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    """Closed set of languages a question is offered in"""
    C = "c"
    PYTHON = "python"
    JAVA = "java"


LANGUAGES = [lang.value for lang in Language]


class QuestionCreate(BaseModel):
    """Admin input for a new question (also used by the YAML seed loader)"""
    title: str
    description: str
    max_points: int = 10
    buggy_code_c: str = ""
    buggy_code_python: str = ""
    buggy_code_java: str = ""
    correct_answer_c: str = ""
    correct_answer_python: str = ""
    correct_answer_java: str = ""

    @field_validator("title", "description")
    @classmethod
    def _required_text(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("max_points")
    @classmethod
    def _positive_points(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value


class Question(QuestionCreate):
    """Stored question, immutable once created"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime

    def buggy_code(self, language: Language) -> str:
        return getattr(self, f"buggy_code_{Language(language).value}")

    def correct_answer(self, language: Language) -> str:
        return getattr(self, f"correct_answer_{Language(language).value}")

    def public_view(self) -> Dict[str, Any]:
        """Contestant-facing fields (correct answers never leave the server)"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "max_points": self.max_points,
            "buggy_code": {lang: self.buggy_code(lang) for lang in LANGUAGES},
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "max_points": self.max_points,
            "created_at": self.created_at.isoformat(),
        }


class Team(BaseModel):
    """Registered team; current_qid is None when unassigned or completed"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_name: str
    score: int = 0
    current_qid: Optional[int] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class Submission(BaseModel):
    """Append-only audit record of one attempt"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: str
    question_id: int
    language: Language
    code: str
    is_correct: bool
    created_at: datetime


class Verdict(BaseModel):
    """Outcome of judging one submission"""
    is_correct: bool
    submission_id: Optional[int] = None


class AdvanceResult(BaseModel):
    """Outcome of moving a team past a solved question"""
    next_question: Optional[Question] = None
    newly_completed: bool = False
    score: int


class SubmissionOutcome(BaseModel):
    """Everything the submit endpoint reports back"""
    is_correct: bool
    question_id: int
    points_awarded: int = 0
    score: int
    next_question_id: Optional[int] = None
    completed: bool = False


class LeaderboardEntry(BaseModel):
    team_id: str
    team_name: str
    score: int
    created_at: datetime


class ChangeEvent(BaseModel):
    """Row change published by the record store after commit"""
    table: str
    type: str  # "INSERT" | "UPDATE"
    row: Dict[str, Any] = Field(default_factory=dict)


class SessionData(BaseModel):
    """Identity of the active team for one session token"""
    team_id: str
    team_name: str
    current_qid: Optional[int] = None


class Settings(BaseModel):
    """Server configuration loaded from YAML"""
    database_url: str = "sqlite:///data/contest.db"
    admin_secret: str = "SECRET123"
    leaderboard_size: int = 10
    questions_file: Optional[str] = None
    store_timeout: float = 10.0
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]
