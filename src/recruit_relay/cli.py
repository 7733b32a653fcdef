from __future__ import annotations

import logging

import uvicorn

from .config import get_settings


def main() -> None:
    """Serve the relay with uvicorn on HOST:PORT."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    uvicorn.run(
        "recruit_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
