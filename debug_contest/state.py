"""
Global application state
Shared resources accessible across all modules
"""
from typing import Optional

from debug_contest.core.feed import ChangeFeed
from debug_contest.core.progression import ProgressionEngine
from debug_contest.models import Settings
from debug_contest.session import SessionStore
from debug_contest.store import RecordStore

# Loaded at startup from config/contest.yaml
SETTINGS: Settings = Settings()

# Row-change fan-out, fed by STORE after each commit
FEED: ChangeFeed = ChangeFeed()

# Record store and progression engine, created at startup
STORE: Optional[RecordStore] = None
ENGINE: Optional[ProgressionEngine] = None

# Session token -> team identity
SESSIONS: SessionStore = SessionStore()
