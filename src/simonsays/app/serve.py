from __future__ import annotations

import uvicorn

from simonsays.core.config.settings import settings


def main() -> None:
    """
    Console entrypoint (`simonsays-serve`): run the API under uvicorn.

    Host and port come from SIMON_HOST / SIMON_PORT.
    """
    uvicorn.run(
        "simonsays.app.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,  # configure_logging() owns the output
    )


if __name__ == "__main__":
    main()
