"""
FastAPI main application
Debug Contest Server - teams fix buggy snippets, scored by normalized exact match

Modular architecture with separated API routers in debug_contest/api/:
- health.py: Health check and system status
- team.py: Team login/logout (find-or-create by name)
- submission.py: Contest view and code submission
- leaderboard.py: Leaderboard snapshot and live WebSocket feed
- admin.py: Question creation, team/question/submission listings
- config.py: Public contest configuration

All routers access shared state via debug_contest.state module.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from debug_contest import __version__, state
from debug_contest.config import load_settings
from debug_contest.core.feed import ChangeFeed
from debug_contest.core.progression import ProgressionEngine
from debug_contest.db import create_store_engine, make_session_factory
from debug_contest.errors import StoreError
from debug_contest.models import Settings
from debug_contest.question_loader import seed_questions
from debug_contest.session import SessionStore
from debug_contest.store import RecordStore

from debug_contest.api import health, team, submission, leaderboard, admin
from debug_contest.api import config as config_router


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def init_state(settings: Settings) -> None:
    """Build store, feed, engine and sessions from settings"""
    engine = create_store_engine(settings.database_url, timeout=settings.store_timeout)

    state.SETTINGS = settings
    state.FEED = ChangeFeed()
    state.STORE = RecordStore(make_session_factory(engine), feed=state.FEED)
    state.ENGINE = ProgressionEngine(state.STORE)
    state.SESSIONS = SessionStore()

    if settings.questions_file:
        seed_questions(state.STORE, settings.questions_file)


def create_app(settings: Optional[Settings] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        app_settings = settings or load_settings()
        logging.getLogger().setLevel(app_settings.log_level.upper())
        try:
            init_state(app_settings)
            logger.info(
                f"✅ Server started with {state.STORE.count_questions()} questions "
                f"({app_settings.database_url})"
            )
        except Exception as e:
            logger.error(f"❌ Failed to initialize contest state: {e}")
            raise

        yield

        # Shutdown
        logger.info("🛑 Server shutting down")

    app = FastAPI(
        title="Debug Contest Server",
        description="Buggy-code contest with exact-match judging and a live leaderboard",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=(settings.cors_origins if settings else ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"❌ Store failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"detail": "The contest service is temporarily unavailable. Please try again."},
        )

    # ==================== INCLUDE ROUTERS ====================

    # Health check (GET /)
    app.include_router(health.router)

    # Team endpoints (POST /teams/login, /teams/logout, GET /teams/me)
    app.include_router(team.router)

    # Contest endpoints (GET /contest, POST /submit)
    app.include_router(submission.router)

    # Leaderboard endpoints (GET /api/leaderboard-data, WS /ws/leaderboard)
    app.include_router(leaderboard.router)

    # Admin endpoints (POST/GET /admin/questions, GET /admin/teams, ...)
    app.include_router(admin.router)

    # Config endpoint (GET /config)
    app.include_router(config_router.router)

    return app


setup_logging()
app = create_app()


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
