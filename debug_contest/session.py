"""
Session store for team identity

Maps an opaque session token (teamSessionId) to the team it belongs to.
Written at login, read on every contest request, cleared at logout.
Progress itself lives in the record store, so losing a session only
means logging in again.
"""
import uuid
from typing import Dict, Optional

from debug_contest.models import SessionData


class SessionStore:

    def __init__(self):
        self._sessions: Dict[str, SessionData] = {}

    def save(self, data: SessionData) -> str:
        """Store identity under a fresh token and return the token"""
        token = uuid.uuid4().hex
        self._sessions[token] = data
        return token

    def load(self, token: Optional[str]) -> Optional[SessionData]:
        if not token:
            return None
        return self._sessions.get(token)

    def update_current_qid(self, token: str, current_qid: Optional[int]) -> None:
        data = self._sessions.get(token)
        if data is not None:
            data.current_qid = current_qid

    def clear(self, token: Optional[str]) -> bool:
        """Drop the session; False if it did not exist"""
        if not token:
            return False
        return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
