from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from threading import Lock
from typing import Literal

SessionStatus = Literal["created", "idle", "awaiting_input", "lost", "error"]


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    In-memory view of a session for API visibility.

    The live engine is the source of truth; this only mirrors its status.
    """
    session_id: str
    status: SessionStatus
    created_at_utc: datetime
    updated_at_utc: datetime

    best_round: int = 0
    games_played: int = 0

    error_type: str | None = None
    error_message: str | None = None


class SessionRegistry:
    """
    Thread-safe registry of session status.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: dict[str, SessionRecord] = {}

    def upsert_created(self, *, session_id: str, created_at_utc: datetime) -> SessionRecord:
        rec = SessionRecord(
            session_id=session_id,
            status="created",
            created_at_utc=created_at_utc,
            updated_at_utc=datetime.now(timezone.utc),
        )
        with self._lock:
            self._sessions[session_id] = rec
        return rec

    def mark_game_started(self, *, session_id: str) -> None:
        with self._lock:
            cur = self._require(session_id)
            self._sessions[session_id] = replace(
                cur,
                status="awaiting_input",
                games_played=cur.games_played + 1,
                updated_at_utc=datetime.now(timezone.utc),
                error_type=None,
                error_message=None,
            )

    def mark_status(self, *, session_id: str, status: SessionStatus, round: int) -> None:
        with self._lock:
            cur = self._require(session_id)
            self._sessions[session_id] = replace(
                cur,
                status=status,
                best_round=max(cur.best_round, round),
                updated_at_utc=datetime.now(timezone.utc),
            )

    def mark_error(self, *, session_id: str, error_type: str, error_message: str) -> None:
        with self._lock:
            cur = self._sessions.get(session_id)
            now = datetime.now(timezone.utc)

            if cur is None:
                self._sessions[session_id] = SessionRecord(
                    session_id=session_id,
                    status="error",
                    created_at_utc=now,
                    updated_at_utc=now,
                    error_type=error_type,
                    error_message=error_message,
                )
                return

            self._sessions[session_id] = replace(
                cur,
                status="error",
                updated_at_utc=now,
                error_type=error_type,
                error_message=error_message,
            )

    def remove(self, *, session_id: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def get(self, *, session_id: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(session_id)

    def list(self) -> list[SessionRecord]:
        with self._lock:
            items = list(self._sessions.values())
        items.sort(key=lambda r: r.updated_at_utc, reverse=True)
        return items

    def _require(self, session_id: str) -> SessionRecord:
        cur = self._sessions.get(session_id)
        if cur is None:
            raise KeyError(f"unknown session: {session_id}")
        return cur
