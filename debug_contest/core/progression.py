"""
Contest progression engine

Per team the contest is a state machine over the ordered question list:

    AT(q_0) --correct--> AT(q_1) --correct--> ... AT(q_n) --correct--> DONE
    AT(q_i) --incorrect--> AT(q_i)

DONE is terminal. The team's stored pointer (current_qid) plus its
completion stamp is the whole state, so resolving it again after a refresh
or a re-login always resumes where the team left off.
"""
import logging
from typing import List, Optional, Sequence

from debug_contest.core.normalizer import codes_match, normalize_code
from debug_contest.errors import (
    ContestCompletedError, NoActiveQuestionError, QuestionMismatchError,
    SessionNotFoundError, ValidationError
)
from debug_contest.models import (
    AdvanceResult, Language, Question, SubmissionOutcome, Team, Verdict
)
from debug_contest.store import RecordStore


logger = logging.getLogger(__name__)


def parse_language(language) -> Language:
    if isinstance(language, Language):
        return language
    try:
        return Language(str(language).lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported language: {language}. Expected one of: c, python, java"
        ) from None


def find_question_index(questions: Sequence[Question], question_id: Optional[int]) -> int:
    """Position of question_id in the ordered list, or -1"""
    if question_id is None:
        return -1
    for idx, question in enumerate(questions):
        if question.id == question_id:
            return idx
    return -1


def resolve_active_question(team: Team, questions: Sequence[Question]) -> Optional[Question]:
    """
    Question the team is expected to solve now

    - Completed team → None
    - Stored pointer found → that question
    - Pointer missing or stale → first question
    - No questions → None
    """
    if team.is_completed or not questions:
        return None

    idx = find_question_index(questions, team.current_qid)
    return questions[idx if idx != -1 else 0]


def next_question_after(questions: Sequence[Question], question: Question) -> Optional[Question]:
    idx = find_question_index(questions, question.id)
    if idx == -1 or idx + 1 >= len(questions):
        return None
    return questions[idx + 1]


def require_active_question(team: Team, questions: Sequence[Question]) -> Question:
    active = resolve_active_question(team, questions)
    if active is not None:
        return active
    if team.is_completed:
        raise ContestCompletedError(f"Team {team.team_name} already completed the contest")
    raise NoActiveQuestionError("No questions configured")


class ProgressionEngine:
    """Judges submissions and advances teams through the question list"""

    def __init__(self, store: RecordStore):
        self.store = store

    def judge_submission(
        self,
        team: Team,
        question: Question,
        language,
        submitted_code: str,
        questions: Optional[List[Question]] = None,
    ) -> Verdict:
        """
        Compare normalized code against the stored answer and record the attempt

        Raises:
            ValidationError: unknown language or no answer stored for it
            ContestCompletedError / NoActiveQuestionError: nothing to judge
            QuestionMismatchError: question is not the team's active one
        """
        lang = parse_language(language)
        if questions is None:
            questions = self.store.list_questions()

        active = require_active_question(team, questions)
        if active.id != question.id:
            raise QuestionMismatchError(question.id, active.id)

        expected = active.correct_answer(lang)
        if not normalize_code(expected):
            raise ValidationError(f"Question {active.id} has no {lang.value} version")

        is_correct = codes_match(submitted_code, expected)
        submission = self.store.add_submission(
            team_id=team.id,
            question_id=active.id,
            language=lang,
            code=submitted_code or "",
            is_correct=is_correct,
        )

        logger.info(
            f"{'✅' if is_correct else '❌'} Team {team.team_name} | Q{active.id} ({lang.value}) | "
            f"{'Correct' if is_correct else 'Incorrect'}"
        )
        return Verdict(is_correct=is_correct, submission_id=submission.id)

    def advance(
        self,
        team: Team,
        current_question: Question,
        questions: Optional[List[Question]] = None,
    ) -> AdvanceResult:
        """
        Move the team past a solved question and award its points

        Score and pointer change in a single conditional update guarded on
        the pointer value read with the team; ProgressConflictError means
        another request got there first and nothing was applied.
        """
        if questions is None:
            questions = self.store.list_questions()

        next_question = next_question_after(questions, current_question)
        updated = self.store.advance_team(
            team_id=team.id,
            expected_qid=team.current_qid,
            next_qid=next_question.id if next_question else None,
            points=current_question.max_points,
        )

        if next_question is None:
            logger.info(f"🏁 Team {team.team_name} completed the contest with {updated.score} pts")
        else:
            logger.info(
                f"➡️ Team {team.team_name} advanced to Q{next_question.id} | Score: {updated.score}"
            )

        return AdvanceResult(
            next_question=next_question,
            newly_completed=next_question is None,
            score=updated.score,
        )

    def submit(self, team_id: str, question_id: int, language, code: str) -> SubmissionOutcome:
        """Judge one submission for a team and advance on a correct verdict"""
        team = self.store.get_team(team_id)
        if team is None:
            raise SessionNotFoundError(f"Team {team_id} not found")

        questions = self.store.list_questions()
        question = next((q for q in questions if q.id == question_id), None)
        if question is None:
            active = require_active_question(team, questions)
            raise QuestionMismatchError(question_id, active.id)

        verdict = self.judge_submission(team, question, language, code, questions)
        if not verdict.is_correct:
            return SubmissionOutcome(
                is_correct=False,
                question_id=question.id,
                score=team.score,
                next_question_id=question.id,
            )

        result = self.advance(team, question, questions)
        return SubmissionOutcome(
            is_correct=True,
            question_id=question.id,
            points_awarded=question.max_points,
            score=result.score,
            next_question_id=result.next_question.id if result.next_question else None,
            completed=result.newly_completed,
        )
