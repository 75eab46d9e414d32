"""
Admin endpoints for question and team management
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import ValidationError as PydanticValidationError

from debug_contest import state
from debug_contest.models import QuestionCreate


logger = logging.getLogger(__name__)


def _secret_matches(candidate: Optional[str]) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), state.SETTINGS.admin_secret.encode("utf-8"))


async def require_admin(x_admin_secret: Optional[str] = Header(default=None)) -> None:
    if not _secret_matches(x_admin_secret):
        raise HTTPException(status_code=401, detail="Admin secret required")


router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login")
async def admin_login(payload: dict):
    """
    Check the admin password

    Request:
        {"password": "..."}
    """
    if not _secret_matches(payload.get("password")):
        logger.warning("🔒 Admin login rejected")
        raise HTTPException(status_code=401, detail="Incorrect password")
    return {"success": True, "message": "Access granted. Send X-Admin-Secret with admin requests."}


@router.post("/questions", dependencies=[Depends(require_admin)])
def create_question(payload: dict):
    """
    Admin: Create a question

    Request:
        {
            "title": "Off by one",
            "description": "...",
            "max_points": 10,
            "buggy_code_c": "...", "buggy_code_python": "...", "buggy_code_java": "...",
            "correct_answer_c": "...", "correct_answer_python": "...", "correct_answer_java": "..."
        }
    """
    try:
        data = QuestionCreate(**payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        raise HTTPException(status_code=400, detail={"error": "validation_error", "fields": errors}) from exc

    question = state.STORE.create_question(data)
    return {
        "success": True,
        "question": question.summary(),
        "message": "Question added successfully",
    }


@router.get("/questions", dependencies=[Depends(require_admin)])
def list_questions():
    """All questions, newest first"""
    questions = state.STORE.list_questions_newest_first()
    return {"questions": [q.summary() for q in questions], "total": len(questions)}


@router.get("/teams", dependencies=[Depends(require_admin)])
def list_teams():
    """All teams by score (descending)"""
    teams = state.STORE.list_teams_by_score()
    return {
        "teams": [t.model_dump(mode="json") for t in teams],
        "total": len(teams),
    }


@router.get("/submissions", dependencies=[Depends(require_admin)])
def list_submissions(team_id: Optional[str] = None):
    """Submission audit trail, oldest first"""
    submissions = state.STORE.list_submissions(team_id=team_id)
    return {
        "submissions": [s.model_dump(mode="json") for s in submissions],
        "total": len(submissions),
    }
