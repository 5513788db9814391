"""Process entry point: configure logging, then serve the API."""

from __future__ import annotations

import logging

import uvicorn

from app import create_app
from core import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


configure_logging(settings.log_level)
app = create_app(settings)


def main() -> None:
    # Lifespan startup runs before the socket is bound, so a failed
    # configuration or database check exits without ever listening.
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
