"""
Leaderboard endpoints (snapshot + live WebSocket feed)
"""
import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from debug_contest.services.leaderboard import (
    get_leaderboard_data, new_projector, subscribe_team_updates
)


router = APIRouter(tags=["leaderboard"])
logger = logging.getLogger(__name__)


@router.get("/api/leaderboard-data")
def leaderboard_data():
    """Top teams by score, seeded fresh on every call"""
    return get_leaderboard_data()


@router.websocket("/ws/leaderboard")
async def leaderboard_feed(websocket: WebSocket):
    """
    Live leaderboard

    Sends the seeded snapshot on connect, then a new snapshot whenever a
    tracked team's score changes. Teams outside the seeded window appear
    after reconnecting.
    """
    await websocket.accept()
    subscription = subscribe_team_updates()
    projector = new_projector()
    receiver = None
    try:
        await run_in_threadpool(projector.seed)
        await websocket.send_json({"type": "snapshot", "teams": projector.entries()})

        # Client messages are ignored; reading them is how a disconnect is noticed
        receiver = asyncio.ensure_future(websocket.receive_text())
        while True:
            getter = asyncio.ensure_future(subscription.get())
            done, _ = await asyncio.wait({receiver, getter}, return_when=asyncio.FIRST_COMPLETED)

            if getter in done:
                if projector.apply_update(getter.result()):
                    await websocket.send_json({"type": "update", "teams": projector.entries()})
            else:
                getter.cancel()

            if receiver in done:
                receiver.result()
                receiver = asyncio.ensure_future(websocket.receive_text())
    except WebSocketDisconnect:
        logger.info("Leaderboard viewer disconnected")
    finally:
        if receiver is not None and not receiver.done():
            receiver.cancel()
        subscription.close()
