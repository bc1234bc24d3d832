from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = "INFO") -> None:
    """Configure root logging for the CLI and service entry points.

    `level` is a numeric level or a level name in any case. Only the first call
    installs a handler; later calls (tests, a CLI run inside the service process)
    just change the level.
    """
    if isinstance(level, str):
        level = level.strip().upper()

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
