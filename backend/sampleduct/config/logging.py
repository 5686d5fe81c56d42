from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=_FORMAT)
    # Quiet the connection chatter from the cache client.
    logging.getLogger("redis").setLevel(logging.WARNING)
