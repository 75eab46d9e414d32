"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from debug_contest import __version__, state


router = APIRouter(tags=["health"])


@router.get("/")
def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Debug Contest Server",
        "version": __version__,
        "total_questions": state.STORE.count_questions() if state.STORE else 0,
        "active_sessions": len(state.SESSIONS),
        "leaderboard_viewers": state.FEED.subscriber_count,
    }
