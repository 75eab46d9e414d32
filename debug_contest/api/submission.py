"""
Contest view and submission endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from debug_contest import state
from debug_contest.core.progression import (
    find_question_index, parse_language, resolve_active_question
)
from debug_contest.errors import (
    ContestCompletedError, NoActiveQuestionError, ProgressConflictError,
    QuestionMismatchError, SessionNotFoundError, ValidationError
)
from debug_contest.services.team_registry import get_team_by_session


router = APIRouter(tags=["submission"])
logger = logging.getLogger(__name__)


@router.get("/contest")
def contest_view(x_team_session_id: Optional[str] = Header(default=None)):
    """
    Active question for the logged-in team

    Safe to call on every page load; resumes wherever the team left off.
    Correct answers are never included.
    """
    try:
        team = get_team_by_session(x_team_session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    questions = state.STORE.list_questions()
    active = resolve_active_question(team, questions)

    return {
        "team_id": team.id,
        "team_name": team.team_name,
        "score": team.score,
        "completed": team.is_completed,
        "total_questions": len(questions),
        "question_index": find_question_index(questions, active.id) if active else None,
        "question": active.public_view() if active else None,
        "message": (
            "Contest completed! You solved all questions." if team.is_completed
            else None if active else "No questions configured yet."
        ),
    }


@router.post("/submit")
def submit_answer(payload: dict, x_team_session_id: Optional[str] = Header(default=None)):
    """
    Submit fixed code for the active question

    Request:
        {
            "teamSessionId": "<token>",
            "question_id": 1,
            "language": "python",
            "code": "..."
        }

    Response:
        {
            "success": true,
            "is_correct": true,
            "points_awarded": 10,
            "score": 10,
            "next_question_id": 2,
            "completed": false,
            "message": "Correct! You earned 10 points!"
        }
    """
    team_session_id = (
        payload.get("teamSessionId")
        or payload.get("team_session_id")
        or x_team_session_id
    )
    if not team_session_id:
        raise HTTPException(status_code=400, detail="teamSessionId is required")

    question_id = payload.get("question_id")
    if question_id is None:
        raise HTTPException(status_code=400, detail="question_id is required")
    try:
        question_id = int(question_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="question_id must be an integer") from None

    code = payload.get("code")
    if not isinstance(code, str):
        raise HTTPException(status_code=400, detail="code is required")

    try:
        language = parse_language(payload.get("language"))
        team = get_team_by_session(team_session_id)
        outcome = state.ENGINE.submit(team.id, question_id, language, code)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except ContestCompletedError as exc:
        raise HTTPException(
            status_code=409,
            detail={"error": "contest_completed", "message": str(exc)},
        ) from exc
    except NoActiveQuestionError as exc:
        raise HTTPException(
            status_code=409,
            detail={"error": "no_active_question", "message": str(exc)},
        ) from exc
    except QuestionMismatchError as exc:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "question_mismatch",
                "active_question_id": exc.active_qid,
                "message": str(exc),
            },
        ) from exc
    except ProgressConflictError as exc:
        logger.warning(f"⚠️ Progress conflict for session {team_session_id[:8]}: {exc}")
        raise HTTPException(
            status_code=409,
            detail={"error": "progress_conflict", "message": "Your team already moved on. Reload the contest."},
        ) from exc

    state.SESSIONS.update_current_qid(team_session_id, outcome.next_question_id)

    if outcome.is_correct:
        message = f"Correct! You earned {outcome.points_awarded} points!"
        if outcome.completed:
            message += " Contest completed!"
    else:
        message = "Incorrect. Try again!"

    return {
        "success": outcome.is_correct,
        **outcome.model_dump(),
        "message": message,
    }
