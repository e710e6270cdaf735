"""
Live results over WebSocket.
"""
import asyncio
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from typing import Optional
from pickmate.db.session import get_db
from pickmate.core.exceptions import PickmateError
from pickmate.api.dependencies import get_user_from_token
from pickmate.services.decision_service import check_decision_access
from pickmate.services.ranking_service import build_results
from pickmate.services.results_channel import results_channel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws/decisions/{decision_id}/results")
async def stream_results(
    websocket: WebSocket,
    decision_id: int,
    token: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    Send the current ranking on connect, then every recomputed ranking.

    Browsers cannot set headers on WebSocket requests, so the access token
    travels as the ``token`` query parameter.
    """
    user = get_user_from_token(token, db)
    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        check_decision_access(decision_id, user, db)
    except PickmateError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    loop = asyncio.get_running_loop()
    snapshots: asyncio.Queue = asyncio.Queue()
    # Publishers run on other threads; hand snapshots over to this loop
    unsubscribe = results_channel.subscribe(
        decision_id, lambda snapshot: loop.call_soon_threadsafe(snapshots.put_nowait, snapshot)
    )

    receiver = asyncio.ensure_future(_wait_for_disconnect(websocket))
    try:
        initial = build_results(decision_id, db).to_dict()
        db.close()
        await websocket.send_json(initial)

        while True:
            next_snapshot = asyncio.ensure_future(snapshots.get())
            done, _ = await asyncio.wait(
                {next_snapshot, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            if receiver in done:
                next_snapshot.cancel()
                break
            await websocket.send_json(next_snapshot.result())
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        receiver.cancel()
        logger.debug(f"Results stream for decision {decision_id} closed")


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Drain client messages until the socket closes."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return
