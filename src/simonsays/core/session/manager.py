from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from simonsays.core.logging.setup import bind_context
from simonsays.core.session.spec import SessionSpec

log = structlog.get_logger()

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def validate_session_id(session_id: str) -> None:
    if not session_id or not _SESSION_ID_RE.match(session_id):
        raise ValueError(f"invalid session_id: {session_id!r}")


@dataclass(frozen=True, slots=True)
class SessionInfo:
    """
    Immutable metadata describing a single session.
    """
    session_id: str
    created_at_utc: datetime
    spec: SessionSpec
    spec_hash: str


class SessionManager:
    """
    Allocates session identities.

    - unique, sortable ids: <UTC timestamp>_<hex entropy>
    - spec fingerprint for log correlation
    - binds session_id into logging context
    """

    def create_session(self, *, spec: SessionSpec) -> SessionInfo:
        created_at = datetime.now(timezone.utc)
        timestamp = created_at.strftime("%Y%m%dT%H%M%SZ")

        # entropy suffix avoids collisions within the same second
        session_id = f"{timestamp}_{secrets.token_hex(4)}"
        validate_session_id(session_id)

        spec_hash = spec.config_hash()
        bind_context(session_id=session_id)

        log.info(
            "session.created",
            session_id=session_id,
            spec_hash=spec_hash,
            source=spec.source.kind,
            seed=spec.source.seed,
        )

        return SessionInfo(
            session_id=session_id,
            created_at_utc=created_at,
            spec=spec,
            spec_hash=spec_hash,
        )
