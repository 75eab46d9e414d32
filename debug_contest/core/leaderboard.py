"""
Leaderboard projector - bounded, ranked view of team scores

Seeded from the store, then kept current by team UPDATE events from the
change feed. Only teams already inside the seeded window are tracked; a
team climbing into the top N shows up on the next seed.
"""
import logging
from typing import Dict, List

from debug_contest.models import ChangeEvent, LeaderboardEntry
from debug_contest.store import RecordStore


logger = logging.getLogger(__name__)

DEFAULT_SIZE = 10


def _rank_key(entry: LeaderboardEntry):
    # same ordering as RecordStore.list_teams_by_score
    return (-entry.score, entry.created_at, entry.team_id)


class LeaderboardProjector:

    def __init__(self, store: RecordStore, size: int = DEFAULT_SIZE):
        self.store = store
        self.size = size
        self._entries: List[LeaderboardEntry] = []

    def seed(self) -> List[LeaderboardEntry]:
        """Load the top N teams by score (descending, registration order on ties)"""
        teams = self.store.list_teams_by_score(limit=self.size)
        self._entries = [
            LeaderboardEntry(
                team_id=t.id, team_name=t.team_name, score=t.score, created_at=t.created_at
            )
            for t in teams
        ]
        return list(self._entries)

    def apply_update(self, event: ChangeEvent) -> bool:
        """
        Replace a tracked team's score and re-sort

        Returns:
            True if the view changed, False if the team is not tracked
        """
        team_id = event.row.get("id")
        score = event.row.get("score")
        if team_id is None or score is None:
            return False

        for entry in self._entries:
            if entry.team_id == team_id:
                entry.score = int(score)
                break
        else:
            return False

        self._entries = sorted(self._entries, key=_rank_key)
        return True

    def entries(self) -> List[Dict]:
        return [
            {"rank": idx + 1, **entry.model_dump(mode="json")}
            for idx, entry in enumerate(self._entries)
        ]

    def team_ids(self) -> List[str]:
        return [entry.team_id for entry in self._entries]
