"""Team login, logout and session lookup"""
import logging
from typing import Dict, Optional

from debug_contest import state
from debug_contest.errors import SessionNotFoundError, ValidationError
from debug_contest.models import SessionData, Team


logger = logging.getLogger(__name__)


def login(team_name: str) -> Dict:
    """
    Find or create the team and open a session for it

    Returns:
        team info plus team_session_id and whether the team was just created
    """
    clean_name = (team_name or "").strip()
    if not clean_name:
        raise ValidationError("team_name required")

    team, created = state.STORE.find_or_create_team(clean_name)
    token = state.SESSIONS.save(
        SessionData(team_id=team.id, team_name=team.team_name, current_qid=team.current_qid)
    )

    if created:
        logger.info(f"🆕 Team created: {team.team_name} ({team.id})")
    else:
        logger.info(f"👋 Team logged in again: {team.team_name} ({team.id})")

    return {
        "team_id": team.id,
        "team_name": team.team_name,
        "team_session_id": token,
        "current_qid": team.current_qid,
        "score": team.score,
        "created": created,
    }


def logout(team_session_id: str) -> bool:
    return state.SESSIONS.clear(team_session_id)


def get_team_by_session(team_session_id: Optional[str]) -> Team:
    """
    Current team record for a session token

    Raises:
        SessionNotFoundError: unknown token or team no longer in the store
    """
    session = state.SESSIONS.load(team_session_id)
    if session is None:
        raise SessionNotFoundError("Invalid or expired teamSessionId")

    team = state.STORE.get_team(session.team_id)
    if team is None:
        state.SESSIONS.clear(team_session_id)
        raise SessionNotFoundError("Team for this session no longer exists")

    state.SESSIONS.update_current_qid(team_session_id, team.current_qid)
    return team
