from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from simonsays.core.config.settings import settings
from simonsays.core.engine.signals import Signal, SignalSourceExhausted
from simonsays.core.session.assembly import SessionHandle, build_session
from simonsays.core.session.lockout import InputLocked
from simonsays.core.session.manager import SessionManager
from simonsays.core.session.registry import SessionRegistry, SessionStatus
from simonsays.core.session.spec import SessionSpec, SignalSourceSpec

log = structlog.get_logger()

router = APIRouter(tags=["sessions"])

# Single-process registry of live sessions.
_registry = SessionRegistry()
_manager = SessionManager()

_live_lock = Lock()
_live: dict[str, SessionHandle] = {}


# =========================
# Schemas
# =========================

class CreateSessionRequest(BaseModel):
    seed: int | None = Field(default=None, description="Optional RNG seed override")
    session_spec: SessionSpec | None = Field(default=None, description="Optional SessionSpec override")


class CreateSessionResponse(BaseModel):
    session_id: str
    spec_hash: str


class SubmitActionRequest(BaseModel):
    signal: Signal


class GameStateResponse(BaseModel):
    session_id: str
    status: SessionStatus
    round: int
    progress_index: int
    sequence_length: int
    input_locked: bool
    last_ordinal: int


class CommandResponse(BaseModel):
    state: GameStateResponse
    events: list[dict[str, Any]]


class ActionResponse(CommandResponse):
    matched: bool


class EventsResponse(BaseModel):
    session_id: str
    last_ordinal: int
    events: list[dict[str, Any]]


class SessionDetailsResponse(BaseModel):
    session_id: str
    status: SessionStatus
    created_at_utc: datetime
    updated_at_utc: datetime
    best_round: int
    games_played: int
    state: GameStateResponse
    error_type: str | None = None
    error_message: str | None = None


class SessionsListResponse(BaseModel):
    sessions: list[SessionDetailsResponse]


# =========================
# Helpers
# =========================

def _get_handle(session_id: str) -> SessionHandle:
    with _live_lock:
        handle = _live.get(session_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="session not found")
    return handle


def _state_of(handle: SessionHandle) -> GameStateResponse:
    snap = handle.engine.snapshot()
    return GameStateResponse(
        session_id=handle.session_id,
        status=snap.status.value,
        round=snap.current_round,
        progress_index=snap.progress_index,
        sequence_length=len(snap.sequence),
        input_locked=handle.lockout.locked,
        last_ordinal=handle.events.last_ordinal(),
    )


def _sync_registry(handle: SessionHandle) -> GameStateResponse:
    state = _state_of(handle)
    _registry.mark_status(session_id=handle.session_id, status=state.status, round=state.round)
    return state


def _details(handle: SessionHandle) -> SessionDetailsResponse:
    rec = _registry.get(session_id=handle.session_id)
    if rec is None:
        raise HTTPException(status_code=404, detail="session not found")
    return SessionDetailsResponse(
        session_id=rec.session_id,
        status=rec.status,
        created_at_utc=rec.created_at_utc,
        updated_at_utc=rec.updated_at_utc,
        best_round=rec.best_round,
        games_played=rec.games_played,
        state=_state_of(handle),
        error_type=rec.error_type,
        error_message=rec.error_message,
    )


# =========================
# Routes
# =========================

@router.post("/sessions", response_model=CreateSessionResponse)
def create_session(payload: CreateSessionRequest) -> CreateSessionResponse:
    if payload.session_spec is None:
        seed = payload.seed if payload.seed is not None else settings.default_seed
        spec = SessionSpec(
            source=SignalSourceSpec(seed=seed),
            input_lockout=settings.input_lockout,
        )
    else:
        spec = payload.session_spec
        if payload.seed is not None and spec.source.seed is None:
            spec.source.seed = payload.seed
        # only an explicit input_lockout in the request overrides the server default
        if "input_lockout" not in spec.model_fields_set:
            spec.input_lockout = settings.input_lockout

    with _live_lock:
        if len(_live) >= settings.max_sessions:
            raise HTTPException(status_code=409, detail="too many live sessions")

    info = _manager.create_session(spec=spec)
    handle = build_session(info=info)

    with _live_lock:
        _live[info.session_id] = handle
    _registry.upsert_created(session_id=info.session_id, created_at_utc=info.created_at_utc)

    return CreateSessionResponse(session_id=info.session_id, spec_hash=info.spec_hash)


@router.post("/sessions/{session_id}/start", response_model=CommandResponse)
def start_game(session_id: str) -> CommandResponse:
    handle = _get_handle(session_id)
    cursor = handle.events.last_ordinal()

    try:
        handle.engine.start_game()
    except SignalSourceExhausted as e:
        log.error("session.source_exhausted", session_id=session_id, error=str(e))
        _registry.mark_error(session_id=session_id, error_type=type(e).__name__, error_message=str(e))
        raise HTTPException(status_code=409, detail=str(e))

    _registry.mark_game_started(session_id=session_id)
    return CommandResponse(state=_sync_registry(handle), events=handle.events.iter_dicts(cursor))


@router.post("/sessions/{session_id}/actions", response_model=ActionResponse)
def submit_action(session_id: str, payload: SubmitActionRequest) -> ActionResponse:
    handle = _get_handle(session_id)
    cursor = handle.events.last_ordinal()

    try:
        handle.lockout.check()
        matched = handle.engine.submit_action(payload.signal)
    except InputLocked as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SignalSourceExhausted as e:
        log.error("session.source_exhausted", session_id=session_id, error=str(e))
        _registry.mark_error(session_id=session_id, error_type=type(e).__name__, error_message=str(e))
        raise HTTPException(status_code=409, detail=str(e))

    return ActionResponse(
        matched=matched,
        state=_sync_registry(handle),
        events=handle.events.iter_dicts(cursor),
    )


@router.post("/sessions/{session_id}/ready", response_model=GameStateResponse)
def replay_finished(session_id: str) -> GameStateResponse:
    handle = _get_handle(session_id)
    handle.lockout.release()
    return _state_of(handle)


@router.get("/sessions/{session_id}/events", response_model=EventsResponse)
def list_events(session_id: str, after: int = Query(default=0, ge=0)) -> EventsResponse:
    handle = _get_handle(session_id)
    return EventsResponse(
        session_id=session_id,
        last_ordinal=handle.events.last_ordinal(),
        events=handle.events.iter_dicts(after),
    )


@router.get("/sessions", response_model=SessionsListResponse)
def list_sessions() -> SessionsListResponse:
    with _live_lock:
        handles = dict(_live)
    out = [_details(handles[rec.session_id]) for rec in _registry.list() if rec.session_id in handles]
    return SessionsListResponse(sessions=out)


@router.get("/sessions/{session_id}", response_model=SessionDetailsResponse)
def get_session(session_id: str) -> SessionDetailsResponse:
    return _details(_get_handle(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> None:
    with _live_lock:
        handle = _live.pop(session_id, None)
    if handle is None:
        raise HTTPException(status_code=404, detail="session not found")

    _registry.remove(session_id=session_id)
    log.info("session.deleted", session_id=session_id, events=len(handle.events))
