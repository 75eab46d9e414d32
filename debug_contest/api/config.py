"""
Configuration endpoints
"""
from fastapi import APIRouter

from debug_contest import state
from debug_contest.models import LANGUAGES


router = APIRouter(tags=["config"])


@router.get("/config")
def get_config():
    """Public contest configuration (no secrets)"""
    return {
        "languages": LANGUAGES,
        "leaderboard_size": state.SETTINGS.leaderboard_size,
        "total_questions": state.STORE.count_questions(),
    }
