"""
Record store for questions, teams and submissions

Wraps SQLAlchemy sessions; every database fault surfaces as StoreError and
every committed team change is published to the change feed.
"""
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from debug_contest.core.feed import ChangeFeed
from debug_contest.db import QuestionRow, SubmissionRow, TeamRow, utcnow
from debug_contest.errors import ProgressConflictError, StoreError
from debug_contest.models import (
    ChangeEvent, Language, Question, QuestionCreate, Submission, Team
)


logger = logging.getLogger(__name__)


def generate_team_id(team_name: str) -> str:
    slug = team_name.strip().lower().replace(' ', '-')[:20]
    unique_suffix = uuid.uuid4().hex[:6]
    return f"team-{slug}-{unique_suffix}" if slug else f"team-{unique_suffix}"


def _team_event(event_type: str, team: Team) -> ChangeEvent:
    return ChangeEvent(table="teams", type=event_type, row=team.model_dump(mode="json"))


class RecordStore:
    """Transactional access to the contest tables"""

    def __init__(self, session_factory: sessionmaker, feed: Optional[ChangeFeed] = None):
        self._session_factory = session_factory
        self.feed = feed

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ Store operation failed: {type(e).__name__}: {e}", exc_info=True)
            raise StoreError("Record store operation failed") from e
        finally:
            session.close()

    def _publish(self, event: ChangeEvent) -> None:
        if self.feed is not None:
            self.feed.publish(event)

    # ==================== QUESTIONS ====================

    def list_questions(self) -> List[Question]:
        """All questions in contest order (created_at, then insertion order)"""
        with self._session() as session:
            rows = session.execute(
                select(QuestionRow).order_by(QuestionRow.created_at.asc(), QuestionRow.id.asc())
            ).scalars().all()
            return [Question.model_validate(row) for row in rows]

    def list_questions_newest_first(self) -> List[Question]:
        return list(reversed(self.list_questions()))

    def count_questions(self) -> int:
        with self._session() as session:
            return session.execute(select(func.count(QuestionRow.id))).scalar_one()

    def get_question(self, question_id: int) -> Optional[Question]:
        with self._session() as session:
            row = session.get(QuestionRow, question_id)
            return Question.model_validate(row) if row else None

    def create_question(self, data: QuestionCreate) -> Question:
        with self._session() as session:
            row = QuestionRow(**data.model_dump(), created_at=utcnow())
            session.add(row)
            session.commit()
            question = Question.model_validate(row)
        logger.info(f"✅ Question {question.id} created: {question.title} ({question.max_points} pts)")
        return question

    # ==================== TEAMS ====================

    def get_team(self, team_id: str) -> Optional[Team]:
        with self._session() as session:
            row = session.get(TeamRow, team_id)
            return Team.model_validate(row) if row else None

    def find_team_by_name(self, team_name: str) -> Optional[Team]:
        """Exact, case-sensitive lookup; None means no such team"""
        with self._session() as session:
            row = session.execute(
                select(TeamRow).where(TeamRow.team_name == team_name)
            ).scalar_one_or_none()
            return Team.model_validate(row) if row else None

    def find_or_create_team(self, team_name: str) -> Tuple[Team, bool]:
        """
        Return the team with this exact name, creating it if absent

        A new team starts at the first question by creation order. When a
        concurrent login inserts the same name first, the unique constraint
        rejects our insert and the winner's row is returned instead.

        Returns:
            (team, created)
        """
        with self._session() as session:
            existing = session.execute(
                select(TeamRow).where(TeamRow.team_name == team_name)
            ).scalar_one_or_none()
            if existing is not None:
                return Team.model_validate(existing), False

            first_qid = session.execute(
                select(QuestionRow.id)
                .order_by(QuestionRow.created_at.asc(), QuestionRow.id.asc())
                .limit(1)
            ).scalar_one_or_none()

            row = TeamRow(
                id=generate_team_id(team_name),
                team_name=team_name,
                score=0,
                current_qid=first_qid,
                created_at=utcnow(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.warning(f"⚠️ Concurrent registration of team '{team_name}', reusing existing row")
                winner = session.execute(
                    select(TeamRow).where(TeamRow.team_name == team_name)
                ).scalar_one_or_none()
                if winner is None:
                    raise
                return Team.model_validate(winner), False

            team = Team.model_validate(row)

        self._publish(_team_event("INSERT", team))
        return team, True

    def list_teams_by_score(self, limit: Optional[int] = None) -> List[Team]:
        """Teams by score descending; ties keep registration order"""
        with self._session() as session:
            stmt = select(TeamRow).order_by(
                TeamRow.score.desc(), TeamRow.created_at.asc(), TeamRow.id.asc()
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return [Team.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def advance_team(
        self,
        team_id: str,
        expected_qid: Optional[int],
        next_qid: Optional[int],
        points: int,
    ) -> Team:
        """
        Add points and move the pointer in one conditional UPDATE

        The row only changes if it still holds expected_qid and is not
        completed. Clearing the pointer (next_qid None) also stamps
        completed_at.

        Raises:
            ProgressConflictError: the row no longer matches; nothing applied
            StoreError: database failure; transaction rolled back
        """
        with self._session() as session:
            stmt = update(TeamRow).where(
                TeamRow.id == team_id,
                TeamRow.completed_at.is_(None),
            )
            if expected_qid is None:
                stmt = stmt.where(TeamRow.current_qid.is_(None))
            else:
                stmt = stmt.where(TeamRow.current_qid == expected_qid)

            values = {"score": TeamRow.score + points, "current_qid": next_qid}
            if next_qid is None:
                values["completed_at"] = utcnow()

            result = session.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                session.rollback()
                raise ProgressConflictError(
                    f"Team {team_id} moved past question {expected_qid} concurrently"
                )
            session.commit()

            team = Team.model_validate(session.get(TeamRow, team_id))

        self._publish(_team_event("UPDATE", team))
        return team

    # ==================== SUBMISSIONS ====================

    def add_submission(
        self,
        team_id: str,
        question_id: int,
        language: Language,
        code: str,
        is_correct: bool,
    ) -> Submission:
        with self._session() as session:
            row = SubmissionRow(
                team_id=team_id,
                question_id=question_id,
                language=Language(language).value,
                code=code,
                is_correct=is_correct,
                created_at=utcnow(),
            )
            session.add(row)
            session.commit()
            return Submission.model_validate(row)

    def list_submissions(self, team_id: Optional[str] = None) -> List[Submission]:
        with self._session() as session:
            stmt = select(SubmissionRow).order_by(SubmissionRow.id.asc())
            if team_id is not None:
                stmt = stmt.where(SubmissionRow.team_id == team_id)
            return [Submission.model_validate(row) for row in session.execute(stmt).scalars().all()]
