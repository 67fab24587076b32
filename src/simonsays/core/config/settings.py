from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Global application-level configuration.

    Single source of truth for:
    - environment selection
    - logging behavior
    - defaults applied to new game sessions
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMON_",
        env_file=".env",
        extra="ignore",
    )

    # ---- Environment -------------------------------------------------

    env: Literal["local", "staging", "prod"] = "local"

    # ---- Logging -----------------------------------------------------

    log_level: str = "INFO"
    json_logs: bool = True

    # ---- Server ------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    # ---- Sessions ----------------------------------------------------

    # None -> every session is seeded from the wall clock
    default_seed: Optional[int] = Field(
        default=None,
        description="Default RNG seed for new sessions",
    )

    input_lockout: bool = Field(
        default=False,
        description="Reject actions until the client acknowledges the replay",
    )

    max_sessions: int = Field(
        default=1000,
        ge=1,
        description="Live sessions kept in this process before new ones are refused",
    )


# Singleton settings object
settings = AppSettings()
