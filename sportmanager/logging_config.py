"""Logging configuration for the roster service.

Console-only: the process runs under a supervisor that collects stdout.
"""

import logging


def setup_logging(level="INFO") -> logging.Logger:
    """Configure the root logger with a single console handler.

    Existing handlers are cleared first so calling this more than once
    (app factory in tests, reloader in development) does not duplicate
    output.

    Args:
        level: Level name or number for the root logger.

    Returns:
        The configured root logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(console)

    # Per-statement SQL logging is too noisy even at DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(max(level, logging.INFO))

    return root
