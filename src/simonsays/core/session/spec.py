from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from simonsays.core.engine.signals import Signal

SourceKind = Literal["random", "scripted"]


class SignalSourceSpec(BaseModel):
    """
    Where a session's signals come from.

    "scripted" replays `script` in order and is meant for demos and tests.
    """
    kind: SourceKind = Field(default="random")
    seed: Optional[int] = Field(default=None, description="RNG seed; None seeds from the clock")
    script: list[Signal] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_kind_payload(self) -> "SignalSourceSpec":
        if self.kind == "scripted" and not self.script:
            raise ValueError("source.script is required when kind='scripted'")
        if self.kind == "random" and self.script:
            raise ValueError("source.script is only valid when kind='scripted'")
        return self


class SessionSpec(BaseModel):
    """
    Canonical configuration of one game session.

    - deterministic config hash
    - versioned schema
    """
    schema_version: int = Field(default=1, description="SessionSpec schema version")

    created_at_utc: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    source: SignalSourceSpec = Field(default_factory=SignalSourceSpec)
    input_lockout: bool = Field(default=False, description="Gate actions until the replay is acknowledged")

    tags: dict[str, str] = Field(default_factory=dict, description="Arbitrary session tags")

    def to_canonical_dict(self) -> dict:
        """
        Stable JSON-compatible dict (no datetime/enum objects). This is what gets hashed.
        """
        d = self.model_dump(mode="json")
        d["created_at_utc"] = self.created_at_utc.astimezone(timezone.utc).isoformat()
        return d

    def config_hash(self) -> str:
        payload = self.to_canonical_dict()
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return hashlib.sha256(blob.encode("utf-8")).hexdigest()
