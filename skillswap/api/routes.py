"""
API endpoints for the SkillSwap lifecycle.

7 call APIs + 1 WebSocket endpoint. The acting user arrives already
authenticated in the X-User-Id header; this layer only translates
requests into engine calls and engine errors into HTTP responses.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, WebSocket, WebSocketDisconnect

from skillswap.core.engine import SwapLifecycleEngine
from skillswap.core.errors import (
    DuplicateSwapRequest,
    InvalidSkillOwnership,
    InvalidStateTransition,
    NotAuthorized,
    SelfSwapNotAllowed,
    SwapError,
    SwapNotFound,
)
from skillswap.core.models import SwapRequest, SwapStatus
from skillswap.infra.event_pusher import WebSocketDispatcher

from .schemas import (
    ErrorDetail,
    HealthResponse,
    ProposeSwapRequest,
    SwapListResponse,
    SwapResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
ws_router = APIRouter()

# Each engine error kind maps to its own status + code
ERROR_STATUS: dict[type[SwapError], int] = {
    SelfSwapNotAllowed: 400,
    InvalidSkillOwnership: 400,
    DuplicateSwapRequest: 409,
    SwapNotFound: 404,
    NotAuthorized: 403,
    InvalidStateTransition: 409,
}


# ============ Dependencies ============

def get_engine(request: Request) -> SwapLifecycleEngine:
    return request.app.state.engine


def get_acting_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(401, "X-User-Id header required")
    return x_user_id


def _to_http(exc: SwapError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(exc), 400)
    detail = ErrorDetail(code=exc.code, message=str(exc))
    return HTTPException(status_code, detail.model_dump())


async def _respond(engine: SwapLifecycleEngine, swap: SwapRequest) -> SwapResponse:
    offered_name, wanted_name = await engine.skill_names(swap)
    return SwapResponse.from_swap(swap, offered_name, wanted_name)


# ============ Swap Endpoints ============

@router.post("/swaps", response_model=SwapResponse, status_code=201)
async def propose_swap(
    req: ProposeSwapRequest,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    try:
        swap = await engine.propose(
            requester_id=user_id,
            responder_id=req.responder_id,
            offered_skill_id=req.offered_skill_id,
            wanted_skill_id=req.wanted_skill_id,
        )
    except SwapError as e:
        raise _to_http(e)
    return await _respond(engine, swap)


@router.get("/swaps", response_model=SwapListResponse)
async def list_swaps(
    status: Optional[SwapStatus] = None,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    swaps = await engine.list_for_user(user_id, status)
    incoming, outgoing = engine.split_by_direction(user_id, swaps)
    return SwapListResponse(
        incoming=[await _respond(engine, s) for s in incoming],
        outgoing=[await _respond(engine, s) for s in outgoing],
    )


@router.get("/swaps/{swap_id}", response_model=SwapResponse)
async def get_swap(
    swap_id: str,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    try:
        swap = await engine.get_swap(swap_id, user_id)
    except SwapError as e:
        raise _to_http(e)
    return await _respond(engine, swap)


@router.put("/swaps/{swap_id}/accept", response_model=SwapResponse)
async def accept_swap(
    swap_id: str,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    try:
        swap = await engine.accept(swap_id, user_id)
    except SwapError as e:
        raise _to_http(e)
    return await _respond(engine, swap)


@router.put("/swaps/{swap_id}/reject", response_model=SwapResponse)
async def reject_swap(
    swap_id: str,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    try:
        swap = await engine.reject(swap_id, user_id)
    except SwapError as e:
        raise _to_http(e)
    return await _respond(engine, swap)


@router.put("/swaps/{swap_id}/cancel", response_model=SwapResponse)
async def cancel_swap(
    swap_id: str,
    user_id: str = Depends(get_acting_user),
    engine: SwapLifecycleEngine = Depends(get_engine),
):
    try:
        swap = await engine.cancel(swap_id, user_id)
    except SwapError as e:
        raise _to_http(e)
    return await _respond(engine, swap)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    return HealthResponse(
        status="OK",
        connections=request.app.state.ws_manager.get_connection_count(),
    )


# ============ WebSocket ============

@ws_router.websocket("/ws/users/{user_id}")
async def user_ws(websocket: WebSocket, user_id: str):
    ws_manager = websocket.app.state.ws_manager
    connection_id = await ws_manager.connect(websocket, user_id)
    if connection_id is None:
        return

    # Ack once registered, so the client knows pushes will reach it.
    ack = WebSocketDispatcher.build_message(
        "connected", {"userId": user_id, "connectionId": connection_id},
    )
    try:
        await websocket.send_json(ack)
    except Exception as e:
        logger.warning("Ack to %s failed: %s", user_id, e)
        await ws_manager.disconnect(user_id, connection_id)
        return

    try:
        while True:
            # Inbound frames are ignored; the socket is push-only.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await ws_manager.disconnect(user_id, connection_id)
