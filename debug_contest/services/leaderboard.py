"""
Leaderboard service - seeded snapshots and live projectors
"""
from typing import Dict

from debug_contest import state
from debug_contest.core.feed import Subscription, updates_only
from debug_contest.core.leaderboard import LeaderboardProjector


def new_projector() -> LeaderboardProjector:
    return LeaderboardProjector(state.STORE, size=state.SETTINGS.leaderboard_size)


def get_leaderboard_data() -> Dict:
    """Freshly seeded top-N, as served on page load"""
    projector = new_projector()
    projector.seed()
    teams = projector.entries()
    return {
        "size": projector.size,
        "teams": teams,
        "total_teams": len(teams),
    }


def subscribe_team_updates() -> Subscription:
    """Queue-backed subscription to team UPDATE events"""
    return state.FEED.subscribe("teams", predicate=updates_only)
