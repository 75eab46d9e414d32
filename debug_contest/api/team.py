"""Team login/logout endpoints"""
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from debug_contest.errors import SessionNotFoundError, ValidationError
from debug_contest.services import team_registry


router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("/login")
def login(payload: dict):
    """
    Join the contest as a team (creates the team on first login)

    Request:
        {"team_name": "Alpha"}
    """
    team_name = payload.get("team_name") or payload.get("teamName")
    if not team_name or not str(team_name).strip():
        raise HTTPException(status_code=400, detail="team_name is required")
    try:
        info = team_registry.login(str(team_name))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    message = "Team created!" if info["created"] else "Welcome back!"
    return {**info, "message": f"{message} Keep your teamSessionId secret."}


@router.post("/logout")
async def logout(payload: dict):
    team_session_id = payload.get("teamSessionId") or payload.get("team_session_id")
    if not team_session_id:
        raise HTTPException(status_code=400, detail="teamSessionId is required")
    cleared = team_registry.logout(team_session_id)
    return {"success": cleared}


@router.get("/me")
def me(x_team_session_id: Optional[str] = Header(default=None)):
    try:
        team = team_registry.get_team_by_session(x_team_session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return {
        "team_id": team.id,
        "team_name": team.team_name,
        "score": team.score,
        "current_qid": team.current_qid,
        "completed": team.is_completed,
    }
