"""Root logger setup for the refledger CLI."""

from __future__ import annotations

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# request lines and driver chatter; only shown with --verbose
_CHATTY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "aiosqlite", "alembic")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for command line runs.

    Library loggers in ``_CHATTY_LOGGERS`` stay at WARNING unless ``level`` is
    DEBUG. ``force=True`` replaces handlers installed earlier in the process.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
